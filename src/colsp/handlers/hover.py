"""
Hover handler.

When the cursor rests on an entity name (a defined or referenced user/bot
message, flow, subflow or ``$variable``), return a short Markdown summary: the
entity kind and name, where it is defined and how often it is referenced.
"""
from __future__ import annotations

from lsprotocol import types as lsp

from colsp.document import ColangDocument
from colsp.lines import EntityRef, EntityType


def _display_name(ref: EntityRef) -> str:
    return f'${ref.name}' if ref.type == EntityType.VARIABLE else ref.name


def _hover_markdown(doc: ColangDocument, ref: EntityRef) -> str:
    lines: list[str] = [f'### {ref.type.pretty_name} `{_display_name(ref)}`']

    definition = doc.definition_of(ref.type, ref.name)
    lines.append('')
    if definition is not None:
        lines.append(f'Defined on line {definition.range.start.line + 1}')
    else:
        lines.append('*Not defined in this document*')

    count = len(doc.references_of(ref.type, ref.name))
    lines.append('')
    lines.append(f'{count} reference{"" if count == 1 else "s"}')
    return '\n'.join(lines)


def get_hover(doc: ColangDocument, position: lsp.Position) -> lsp.Hover | None:
    """Return LSP hover content for *position* in *doc*, or *None*."""
    ref = doc.entity_at(position)
    if ref is None:
        return None
    return lsp.Hover(
        contents=lsp.MarkupContent(
            kind=lsp.MarkupKind.Markdown, value=_hover_markdown(doc, ref),
        ),
        range=ref.range,
    )
