"""
Cross-reference validation.

One top-to-bottom pass over a :class:`~colsp.document.ColangDocument` builds an
:class:`EntityIndex`: for each entity kind a table from name to its
definitions and references, plus a bucket of lines that could not be
understood.  Diagnostics are then derived from the shape of each table:

- *undefined*: referenced but never defined (Error, one per reference);
- *duplicate*: defined more than once (Error, one per definition; variables
  may be re-assigned and are exempt);
- *unused*: defined but never referenced (Warning, one per definition; flows
  are entry points and are exempt);
- *unknown line*: every bucketed line except blank lines and a bare ``else``.

The index is rebuilt from scratch on every call; nothing is kept between runs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from lsprotocol import types as lsp

from colsp.document import ColangDocument
from colsp.lines import (
    BotLine, CommentLine, DefineLine, DoLine, EntityRef, EntityType, IfLine,
    Line, MessageLine, UnknownLine, UserLine, VariableLine, WhenLine,
    assigned_variable, named_entity,
)

logger = logging.getLogger(__name__)

SOURCE = 'colsp'

# Checks skipped per kind.
_SKIP_DUPLICATE = frozenset({EntityType.VARIABLE})
_SKIP_UNUSED = frozenset({EntityType.FLOW})


@dataclass
class EntityCrossReference:
    definitions: list[EntityRef] = field(default_factory=list)
    references: list[EntityRef] = field(default_factory=list)


@dataclass
class EntityIndex:
    tables: dict[EntityType, dict[str, EntityCrossReference]] = field(
        default_factory=lambda: {t: {} for t in EntityType}
    )
    unknown: list[UnknownLine] = field(default_factory=list)

    def entry(self, entity_type: EntityType, name: str) -> EntityCrossReference:
        table = self.tables[entity_type]
        xref = table.get(name)
        if xref is None:
            xref = table[name] = EntityCrossReference()
        return xref

    def add_definition(self, ref: EntityRef) -> None:
        self.entry(ref.type, ref.name).definitions.append(ref)

    def add_reference(self, ref: EntityRef) -> None:
        self.entry(ref.type, ref.name).references.append(ref)

    def add_unknown(self, line: Line) -> None:
        if not isinstance(line, UnknownLine):
            # Recognised, but missing the name its kind requires.
            line = UnknownLine(line.text, line.line_number)
        self.unknown.append(line)


def _index_line(index: EntityIndex, line: Line) -> None:
    match line:
        case DefineLine():
            ref = named_entity(line)
            if ref is None:
                index.add_unknown(line)
            else:
                index.add_definition(ref)
        case UserLine() | BotLine() | DoLine() | WhenLine():
            ref = named_entity(line)
            if ref is None:
                index.add_unknown(line)
            else:
                index.add_reference(ref)
        case MessageLine() | IfLine():
            for var in line.variables:
                index.add_reference(EntityRef(EntityType.VARIABLE, var.name, var.range))
        case VariableLine():
            ref = assigned_variable(line)
            if ref is None:
                index.add_unknown(line)
            else:
                index.add_definition(ref)
            for var in line.variables:
                index.add_reference(EntityRef(EntityType.VARIABLE, var.name, var.range))
        case UnknownLine():
            index.add_unknown(line)
        case CommentLine():
            pass
        case _:
            raise TypeError(f'not a line record: {line!r}')


def build_index(doc: ColangDocument) -> EntityIndex:
    """Fold the lines of *doc* into a fresh :class:`EntityIndex`."""
    index = EntityIndex()
    for line in doc.lines:
        _index_line(index, line)
    return index


def _diagnostic(rng: lsp.Range, message: str, severity: lsp.DiagnosticSeverity) -> lsp.Diagnostic:
    return lsp.Diagnostic(range=rng, message=message, severity=severity, source=SOURCE)


def _entity_diagnostics(entity_type: EntityType, xref: EntityCrossReference) -> list[lsp.Diagnostic]:
    diags: list[lsp.Diagnostic] = []
    defs, refs = xref.definitions, xref.references

    if refs and not defs:
        for ref in refs:
            diags.append(_diagnostic(
                ref.range,
                f"{ref.type.pretty_name} '{ref.name}' does not exist",
                lsp.DiagnosticSeverity.Error,
            ))

    if len(defs) > 1 and entity_type not in _SKIP_DUPLICATE:
        for ref in defs:
            diags.append(_diagnostic(
                ref.range,
                f'Duplicate {ref.type.value} definition',
                lsp.DiagnosticSeverity.Error,
            ))

    if defs and not refs and entity_type not in _SKIP_UNUSED:
        for ref in defs:
            diags.append(_diagnostic(
                ref.range,
                f"{ref.type.pretty_name} '{ref.name}' is declared but never used",
                lsp.DiagnosticSeverity.Warning,
            ))

    return diags


def _unknown_diagnostics(lines: list[UnknownLine]) -> list[lsp.Diagnostic]:
    return [
        _diagnostic(
            lsp.Range(
                start=lsp.Position(line=line.line_number, character=0),
                end=lsp.Position(line=line.line_number, character=len(line.text)),
            ),
            'Unknown line',
            lsp.DiagnosticSeverity.Error,
        )
        for line in lines
        if line.reportable
    ]


def get_diagnostics(doc: ColangDocument) -> list[lsp.Diagnostic]:
    """Return every cross-reference and unknown-line diagnostic for *doc*."""
    index = build_index(doc)
    diags: list[lsp.Diagnostic] = []
    for entity_type in EntityType:
        for xref in index.tables[entity_type].values():
            diags.extend(_entity_diagnostics(entity_type, xref))
    diags.extend(_unknown_diagnostics(index.unknown))
    logger.debug('get_diagnostics: %s → %d diagnostics', doc.uri, len(diags))
    return diags
