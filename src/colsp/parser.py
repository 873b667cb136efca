"""
Line classifier.

``classify_line`` turns one raw line into one typed record from
:mod:`colsp.lines`.  The rules below are tried top to bottom and the first
match wins; order matters (``else when`` has to be claimed by the ``when``
rule before a line falls through to the unknown default, which separately
recognises a bare ``else``).

Every keyword may be indented and must be followed by whitespace or the end
of the line, so ``username`` or ``done`` do not classify as ``user``/``do``.
"""
from __future__ import annotations

import re

from lsprotocol import types as lsp

from colsp.lines import (
    BotLine, CommentLine, DefineLine, DoLine, EntityType, IfLine, Line,
    MessageLine, UnknownLine, UserLine, VariableLine, VariableOccurrence,
    WhenLine,
)

# (kind, pattern) in precedence order.
_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    # Group 1: entity kind, group 2: name
    ('define',   re.compile(r'^\s*define(?=\s|$)(?:\s+(user|bot|flow|subflow)(?=\s|$)(?:\s+(.*))?)?')),
    ('user',     re.compile(r'^\s*user(?=\s|$)(?:\s+(.*))?')),
    ('bot',      re.compile(r'^\s*bot(?=\s|$)(?:\s+(.*))?')),
    ('do',       re.compile(r'^\s*do(?=\s|$)(?:\s+(.*))?')),
    ('message',  re.compile(r'^\s*"')),
    ('comment',  re.compile(r'^\s*#')),
    ('if',       re.compile(r'^\s*if(?=\s|$)(?:\s+(.*))?')),
    # Group 1: leading else, group 2: 'user', group 3: name
    ('when',     re.compile(r'^\s*(?:(else)\s+)?when(?=\s|$)(?:\s+(user)(?=\s|$)(?:\s+(.*))?)?')),
    # Ends at the '$'; the assigned name is read with _VARIABLE_RE.
    ('variable', re.compile(r'^\s*(?=\$)')),
)

# `$identifier` anywhere in a line; group 1 excludes the dollar sign.
_VARIABLE_RE = re.compile(r'\$([A-Za-z_][A-Za-z0-9_]*)')


def _range(line_number: int, start: int, end: int) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=line_number, character=start),
        end=lsp.Position(line=line_number, character=end),
    )


def _name_and_range(
    m: re.Match[str], group: int, line_number: int,
) -> tuple[str | None, lsp.Range | None]:
    """Return the captured name (trailing blanks dropped) and its exact range."""
    raw = m.group(group)
    name = raw.rstrip() if raw is not None else None
    if not name:
        return None, None
    start = m.start(group)
    return name, _range(line_number, start, start + len(name))


def find_variables(text: str, line_number: int, start: int = 0) -> list[VariableOccurrence]:
    """Return every ``$identifier`` at or after column *start*, left to right."""
    return [
        VariableOccurrence(m.group(1), _range(line_number, m.start(1), m.end(1)))
        for m in _VARIABLE_RE.finditer(text, start)
    ]


def _match(text: str) -> tuple[str | None, re.Match[str] | None]:
    for kind, pattern in _RULES:
        m = pattern.match(text)
        if m:
            return kind, m
    return None, None


def classify_line(text: str, line_number: int) -> Line:
    """Classify one line of Colang source into a typed line record."""
    kind, m = _match(text)

    match kind:
        case 'define':
            entity_type = EntityType.parse(m.group(1))
            name, rng = _name_and_range(m, 2, line_number)
            return DefineLine(text, line_number, entity_type=entity_type,
                              entity_name=name, entity_name_range=rng)
        case 'user':
            name, rng = _name_and_range(m, 1, line_number)
            return UserLine(text, line_number, entity_name=name, entity_name_range=rng)
        case 'bot':
            name, rng = _name_and_range(m, 1, line_number)
            return BotLine(text, line_number, entity_name=name, entity_name_range=rng)
        case 'do':
            name, rng = _name_and_range(m, 1, line_number)
            return DoLine(text, line_number, entity_name=name, entity_name_range=rng)
        case 'message':
            return MessageLine(text, line_number,
                               variables=tuple(find_variables(text, line_number)))
        case 'comment':
            return CommentLine(text, line_number)
        case 'if':
            return IfLine(text, line_number,
                          variables=tuple(find_variables(text, line_number)))
        case 'when':
            has_else = m.group(1) is not None
            if m.group(2) is None:
                return WhenLine(text, line_number, has_else=has_else)
            name, rng = _name_and_range(m, 3, line_number)
            return WhenLine(text, line_number, entity_type=EntityType.USER,
                            entity_name=name, entity_name_range=rng, has_else=has_else)
        case 'variable':
            # The first $identifier is assigned; every later one is a reference.
            lhs = _VARIABLE_RE.match(text, m.end())
            if lhs is None:
                name, rng, rhs_start = None, None, m.end() + 1
            else:
                name = lhs.group(1)
                rng = _range(line_number, lhs.start(1), lhs.end(1))
                rhs_start = lhs.end()
            return VariableLine(text, line_number, name=name, name_range=rng,
                                variables=tuple(find_variables(text, line_number, rhs_start)))
        case _:
            stripped = text.strip()
            return UnknownLine(text, line_number,
                               empty=not stripped, bare_else=stripped == 'else')
