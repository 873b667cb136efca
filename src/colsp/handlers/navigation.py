"""Go-to-definition, find-references, outline and rename handlers."""
from __future__ import annotations

from lsprotocol import types as lsp

from colsp.document import ColangDocument
from colsp.lines import EntityType

_SYMBOL_KINDS = {
    EntityType.USER: lsp.SymbolKind.Event,
    EntityType.BOT: lsp.SymbolKind.Event,
    EntityType.FLOW: lsp.SymbolKind.Function,
    EntityType.SUBFLOW: lsp.SymbolKind.Method,
    EntityType.VARIABLE: lsp.SymbolKind.Variable,
}


def get_definition(doc: ColangDocument, position: lsp.Position) -> lsp.Location | None:
    """Location of the definition of the entity at *position*, if any."""
    ref = doc.entity_at(position)
    if ref is None:
        return None
    return doc.definition_of(ref.type, ref.name)


def get_references(
    doc: ColangDocument, position: lsp.Position, include_declaration: bool = False,
) -> list[lsp.Location]:
    ref = doc.entity_at(position)
    if ref is None:
        return []
    return doc.references_of(ref.type, ref.name, include_definitions=include_declaration)


def get_document_symbols(doc: ColangDocument) -> list[lsp.DocumentSymbol]:
    return [
        lsp.DocumentSymbol(
            name=sym.name,
            detail=sym.type.value,
            kind=_SYMBOL_KINDS[sym.type],
            range=sym.range,
            selection_range=sym.range,
        )
        for sym in doc.symbols()
    ]


def get_prepare_rename(doc: ColangDocument, position: lsp.Position) -> lsp.Range | None:
    return doc.rename_target_at(position)


def get_rename(
    doc: ColangDocument, position: lsp.Position, new_name: str,
) -> lsp.WorkspaceEdit | None:
    return doc.rename_edits(position, new_name)
