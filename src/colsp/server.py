"""
colsp Language Server.

Registers LSP capabilities and wires the Colang analysis handlers.  The
server only remembers the latest text of each open document; every request
re-parses that text into a fresh :class:`~colsp.document.ColangDocument`.
"""
from __future__ import annotations

import logging

from pygls.lsp.server import LanguageServer
from lsprotocol import types as lsp

from colsp import __version__
from colsp.config import ServerSettings, apply_log_level, load_settings
from colsp.document import ColangDocument, parse_document
from colsp.handlers import (
    get_definition,
    get_diagnostics,
    get_document_symbols,
    get_hover,
    get_prepare_rename,
    get_references,
    get_rename,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Server instance + per-session state
# ---------------------------------------------------------------------------

server = LanguageServer(
    'colsp', __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)

# Latest source text per open URI.
_sources: dict[str, str] = {}

_settings = ServerSettings()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _document(uri: str) -> ColangDocument:
    """Parse the latest text for *uri* (unknown URIs are empty documents)."""
    return parse_document(uri, _sources.get(uri, ''))


def _publish_diagnostics(uri: str) -> None:
    diags = get_diagnostics(_document(uri))
    limit = _settings.max_number_of_problems
    if len(diags) > limit:
        logger.debug('_publish_diagnostics: %s truncated %d → %d', uri, len(diags), limit)
        diags = diags[:limit]
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=uri, diagnostics=diags)
    )


def _workspace_root(params: lsp.InitializeParams) -> str | None:
    if params.root_uri:
        uri = params.root_uri
        return uri[7:] if uri.startswith('file://') else uri
    return params.root_path


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    global _settings
    opts = getattr(params, 'initialization_options', None)
    _settings = load_settings(_workspace_root(params), opts)
    apply_log_level(_settings.log_level)
    logger.debug('on_initialize: %s', _settings)


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(params: lsp.DidChangeConfigurationParams):
    """Handle live config changes (e.g. ``colang.maxNumberOfProblems`` in VS Code)."""
    settings = getattr(params, 'settings', None) or {}
    if not isinstance(settings, dict):
        return
    _settings.update(settings.get('colang', {}))
    apply_log_level(_settings.log_level)
    # The problem limit may have changed.
    for uri in list(_sources):
        _publish_diagnostics(uri)


# ---------------------------------------------------------------------------
# Text document synchronisation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    td = params.text_document
    _sources[td.uri] = td.text
    _publish_diagnostics(td.uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams):
    uri = params.text_document.uri
    if not params.content_changes:
        return
    # Full sync: the last change carries the whole text.
    _sources[uri] = params.content_changes[-1].text
    _publish_diagnostics(uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    uri = params.text_document.uri
    _sources.pop(uri, None)
    server.text_document_publish_diagnostics(
        lsp.PublishDiagnosticsParams(uri=uri, diagnostics=[])
    )


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_HOVER)
def hover(params: lsp.HoverParams) -> lsp.Hover | None:
    return get_hover(_document(params.text_document.uri), params.position)


@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def definition(params: lsp.DefinitionParams) -> lsp.Location | None:
    return get_definition(_document(params.text_document.uri), params.position)


@server.feature(lsp.TEXT_DOCUMENT_REFERENCES)
def references(params: lsp.ReferenceParams) -> list[lsp.Location]:
    include_declaration = bool(params.context and params.context.include_declaration)
    return get_references(
        _document(params.text_document.uri), params.position, include_declaration,
    )


@server.feature(lsp.TEXT_DOCUMENT_DOCUMENT_SYMBOL)
def document_symbol(params: lsp.DocumentSymbolParams) -> list[lsp.DocumentSymbol]:
    return get_document_symbols(_document(params.text_document.uri))


# ---------------------------------------------------------------------------
# Rename
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_PREPARE_RENAME)
def prepare_rename(params: lsp.PrepareRenameParams) -> lsp.Range | None:
    return get_prepare_rename(_document(params.text_document.uri), params.position)


@server.feature(lsp.TEXT_DOCUMENT_RENAME)
def rename(params: lsp.RenameParams) -> lsp.WorkspaceEdit | None:
    return get_rename(
        _document(params.text_document.uri), params.position, params.new_name,
    )
