"""
Colang document model.

A :class:`ColangDocument` is an immutable snapshot of one ``(uri, source)``
pair, split into lines and classified line by line.  Nothing is cached across
edits: callers build a fresh document from the latest text for every request
(Colang scripts are small, so a full pass is cheap).

Position queries delegate to the per-kind behaviour in :mod:`colsp.lines`.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from lsprotocol import types as lsp

from colsp.lines import (
    DefineLine, EntityRef, EntityType, Line,
    definitions, entity_at, named_entity, occurrences, references,
)
from colsp.parser import classify_line

# LSP recognises all three line terminators.
_LINE_BREAK_RE = re.compile(r'\r\n|\r|\n')


@dataclass(frozen=True)
class Symbol:
    """An outline entry: one per resolved ``define`` line."""
    name: str
    type: EntityType
    range: lsp.Range


def classify(source: str) -> list[Line]:
    """Split *source* on line breaks and classify each line.

    Empty text is a zero-line document; otherwise the result has exactly one
    record per line (a trailing newline yields a final empty line).
    """
    if not source:
        return []
    return [classify_line(text, n) for n, text in enumerate(_LINE_BREAK_RE.split(source))]


@dataclass(frozen=True)
class ColangDocument:
    uri: str
    source: str
    lines: tuple[Line, ...] = field(default=(), repr=False)

    # ------------------------------------------------------------------
    # Position queries
    # ------------------------------------------------------------------

    def line_at(self, line_number: int) -> Line | None:
        if 0 <= line_number < len(self.lines):
            return self.lines[line_number]
        return None

    def entity_at(self, position: lsp.Position) -> EntityRef | None:
        """Return the entity under *position*, or None."""
        line = self.line_at(position.line)
        if line is None:
            return None
        return entity_at(line, position.character)

    def definition_of(self, entity_type: EntityType, name: str) -> lsp.Location | None:
        """Location of the first definition of (*entity_type*, *name*)."""
        for line in self.lines:
            found = definitions(line, entity_type, name)
            if found:
                return lsp.Location(uri=self.uri, range=found[0].range)
        return None

    def references_of(
        self, entity_type: EntityType, name: str, include_definitions: bool = False,
    ) -> list[lsp.Location]:
        """Locations of every reference, in line order.

        With *include_definitions* the definition sites are interleaved in
        line order as well.
        """
        collect = occurrences if include_definitions else references
        return [
            lsp.Location(uri=self.uri, range=ref.range)
            for line in self.lines
            for ref in collect(line, entity_type, name)
        ]

    def symbols(self) -> list[Symbol]:
        """Outline entries for every ``define`` line with a resolved name."""
        result: list[Symbol] = []
        for line in self.lines:
            if isinstance(line, DefineLine):
                ref = named_entity(line)
                if ref is not None:
                    result.append(Symbol(name=ref.name, type=ref.type, range=ref.range))
        return result

    # ------------------------------------------------------------------
    # Rename
    # ------------------------------------------------------------------

    def rename_target_at(self, position: lsp.Position) -> lsp.Range | None:
        """The name range to rename at *position*, or None if not renameable."""
        ref = self.entity_at(position)
        return ref.range if ref is not None else None

    def rename_edits(self, position: lsp.Position, new_name: str) -> lsp.WorkspaceEdit | None:
        """Edits renaming every occurrence of the entity at *position*."""
        ref = self.entity_at(position)
        if ref is None:
            return None
        if ref.type == EntityType.VARIABLE:
            # Variable ranges exclude the sigil.
            new_name = new_name.removeprefix('$')
        edits = [
            lsp.TextEdit(range=occ.range, new_text=new_name)
            for line in self.lines
            for occ in occurrences(line, ref.type, ref.name)
        ]
        if not edits:
            return None
        return lsp.WorkspaceEdit(changes={self.uri: edits})


def parse_document(uri: str, source: str | None) -> ColangDocument:
    """Build a :class:`ColangDocument` from *source* (None is treated as empty)."""
    source = source or ''
    return ColangDocument(uri=uri, source=source, lines=tuple(classify(source)))
