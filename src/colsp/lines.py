"""
Typed line records.

Every line of a Colang document is classified into exactly one of the frozen
dataclasses below.  Together they form a closed union (:data:`Line`); the
per-kind behaviour shared by all of them (entity-at-column, definition and
reference lookup) lives in the module-level functions at the bottom, which
dispatch with ``match`` over the variant classes.

Ranges are ``lsprotocol`` ranges with zero-based lines and characters.
Containment is inclusive at *both* ends (``start <= c <= end``) so that a
caret sitting just after the last character of a name still resolves it.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import NamedTuple, Union

from lsprotocol import types as lsp


class EntityType(str, enum.Enum):
    """Kinds of named entity that can be defined and referenced."""

    USER = 'user'
    BOT = 'bot'
    FLOW = 'flow'
    SUBFLOW = 'subflow'
    VARIABLE = 'variable'

    @classmethod
    def parse(cls, value: str | None) -> EntityType | None:
        """Return the member named by *value* (case-insensitive), or None."""
        if not value:
            return None
        try:
            return cls(value.lower())
        except ValueError:
            return None

    @property
    def pretty_name(self) -> str:
        """Capitalised kind, e.g. ``'Subflow'``."""
        return self.value.capitalize()


class VariableOccurrence(NamedTuple):
    name: str
    range: lsp.Range


class EntityRef(NamedTuple):
    """An entity resolved at some position: its kind, name and name range."""
    type: EntityType
    name: str
    range: lsp.Range


def range_contains(rng: lsp.Range, character: int) -> bool:
    """Return True if *character* lies within *rng* (inclusive at both ends)."""
    return rng.start.character <= character <= rng.end.character


# ---------------------------------------------------------------------------
# Line variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class _LineBase:
    text: str
    line_number: int


@dataclass(frozen=True)
class DefineLine(_LineBase):
    entity_type: EntityType | None = None
    entity_name: str | None = None
    entity_name_range: lsp.Range | None = None


@dataclass(frozen=True)
class UserLine(_LineBase):
    entity_name: str | None = None
    entity_name_range: lsp.Range | None = None


@dataclass(frozen=True)
class BotLine(_LineBase):
    entity_name: str | None = None
    entity_name_range: lsp.Range | None = None


@dataclass(frozen=True)
class DoLine(_LineBase):
    entity_name: str | None = None
    entity_name_range: lsp.Range | None = None


@dataclass(frozen=True)
class MessageLine(_LineBase):
    variables: tuple[VariableOccurrence, ...] = ()


@dataclass(frozen=True)
class CommentLine(_LineBase):
    """``# ...``; never contributes entities, even if it mentions ``$x``."""


@dataclass(frozen=True)
class IfLine(_LineBase):
    variables: tuple[VariableOccurrence, ...] = ()


@dataclass(frozen=True)
class WhenLine(_LineBase):
    entity_type: EntityType | None = None     # only ever USER
    entity_name: str | None = None
    entity_name_range: lsp.Range | None = None
    has_else: bool = False


@dataclass(frozen=True)
class VariableLine(_LineBase):
    """``$name = expression``; *variables* holds the right-hand side occurrences."""
    name: str | None = None
    name_range: lsp.Range | None = None
    variables: tuple[VariableOccurrence, ...] = ()


@dataclass(frozen=True)
class UnknownLine(_LineBase):
    empty: bool = False
    bare_else: bool = False

    @property
    def reportable(self) -> bool:
        return not self.empty and not self.bare_else


Line = Union[
    DefineLine, UserLine, BotLine, DoLine, MessageLine,
    CommentLine, IfLine, WhenLine, VariableLine, UnknownLine,
]


# ---------------------------------------------------------------------------
# Per-kind behaviour
# ---------------------------------------------------------------------------

def named_entity(line: Line) -> EntityRef | None:
    """Return the single entity a define/user/bot/do/when line names.

    Returns None for multi-occurrence and payload-free kinds, and for any
    single-named line whose name or range could not be recovered.
    """
    match line:
        case DefineLine() | WhenLine():
            entity_type = line.entity_type
        case UserLine():
            entity_type = EntityType.USER
        case BotLine():
            entity_type = EntityType.BOT
        case DoLine():
            entity_type = EntityType.SUBFLOW
        case _:
            return None
    if entity_type is None or not line.entity_name or line.entity_name_range is None:
        return None
    return EntityRef(entity_type, line.entity_name, line.entity_name_range)


def _variable_refs(variables) -> list[EntityRef]:
    return [EntityRef(EntityType.VARIABLE, v.name, v.range) for v in variables]


def assigned_variable(line: VariableLine) -> EntityRef | None:
    if not line.name or line.name_range is None:
        return None
    return EntityRef(EntityType.VARIABLE, line.name, line.name_range)


def entity_at(line: Line, character: int) -> EntityRef | None:
    """Return the entity whose name range on *line* contains *character*."""
    match line:
        case DefineLine() | UserLine() | BotLine() | DoLine() | WhenLine():
            candidates = [named_entity(line)]
        case MessageLine() | IfLine():
            candidates = _variable_refs(line.variables)
        case VariableLine():
            candidates = [assigned_variable(line)] + _variable_refs(line.variables)
        case CommentLine() | UnknownLine():
            return None
        case _:
            raise TypeError(f'not a line record: {line!r}')
    for ref in candidates:
        if ref is not None and range_contains(ref.range, character):
            return ref
    return None


def definitions(line: Line, entity_type: EntityType, name: str) -> list[EntityRef]:
    """Definition sites of (*entity_type*, *name*) on *line*."""
    match line:
        case DefineLine():
            ref = named_entity(line)
        case VariableLine():
            ref = assigned_variable(line)
        case (UserLine() | BotLine() | DoLine() | WhenLine() | MessageLine()
              | IfLine() | CommentLine() | UnknownLine()):
            return []
        case _:
            raise TypeError(f'not a line record: {line!r}')
    if ref is not None and ref.type == entity_type and ref.name == name:
        return [ref]
    return []


def references(line: Line, entity_type: EntityType, name: str) -> list[EntityRef]:
    """Reference sites of (*entity_type*, *name*) on *line*, left to right."""
    match line:
        case UserLine() | BotLine() | DoLine() | WhenLine():
            refs = [named_entity(line)]
        case MessageLine() | IfLine() | VariableLine():
            refs = _variable_refs(line.variables)
        case DefineLine() | CommentLine() | UnknownLine():
            return []
        case _:
            raise TypeError(f'not a line record: {line!r}')
    return [r for r in refs if r is not None and r.type == entity_type and r.name == name]


def occurrences(line: Line, entity_type: EntityType, name: str) -> list[EntityRef]:
    """Definitions followed by references; the left-hand side always comes first."""
    return definitions(line, entity_type, name) + references(line, entity_type, name)
