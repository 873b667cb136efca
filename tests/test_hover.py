"""Tests for colsp.handlers.hover: get_hover."""
from __future__ import annotations

from lsprotocol import types as lsp

from colsp.document import parse_document

SOURCE = """\
define user greet
  "hi"
define flow main
  user greet
  $name = "Ann"
  bot welcome
"""


class TestHover:
    def test_hover_on_reference(self):
        from colsp.handlers.hover import get_hover
        doc = parse_document('test.co', SOURCE)
        hover = get_hover(doc, lsp.Position(line=3, character=8))
        assert hover is not None
        assert hover.contents.kind == lsp.MarkupKind.Markdown
        assert 'User `greet`' in hover.contents.value
        assert 'Defined on line 1' in hover.contents.value
        assert '1 reference' in hover.contents.value
        assert hover.range == lsp.Range(
            start=lsp.Position(line=3, character=7),
            end=lsp.Position(line=3, character=12),
        )

    def test_hover_on_undefined_entity(self):
        from colsp.handlers.hover import get_hover
        doc = parse_document('test.co', SOURCE)
        hover = get_hover(doc, lsp.Position(line=5, character=8))
        assert 'Bot `welcome`' in hover.contents.value
        assert 'Not defined' in hover.contents.value

    def test_hover_on_variable_shows_sigil(self):
        from colsp.handlers.hover import get_hover
        doc = parse_document('test.co', SOURCE)
        hover = get_hover(doc, lsp.Position(line=4, character=4))
        assert 'Variable `$name`' in hover.contents.value
        assert '0 references' in hover.contents.value

    def test_hover_returns_none_off_entity(self):
        from colsp.handlers.hover import get_hover
        doc = parse_document('test.co', SOURCE)
        assert get_hover(doc, lsp.Position(line=1, character=3)) is None
        assert get_hover(doc, lsp.Position(line=0, character=2)) is None
