"""Tests for colsp.handlers.diagnostics: cross-reference index and diagnostics."""
from __future__ import annotations

from lsprotocol import types as lsp

from colsp.document import parse_document
from colsp.handlers.diagnostics import build_index, get_diagnostics
from colsp.lines import EntityType, UnknownLine

URI = 'file:///tmp/test.co'

ERROR = lsp.DiagnosticSeverity.Error
WARNING = lsp.DiagnosticSeverity.Warning


def rng(line: int, start: int, end: int) -> lsp.Range:
    return lsp.Range(
        start=lsp.Position(line=line, character=start),
        end=lsp.Position(line=line, character=end),
    )


def diagnose(source: str) -> list[lsp.Diagnostic]:
    return get_diagnostics(parse_document(URI, source))


def summary(diags: list[lsp.Diagnostic]) -> list[tuple]:
    return [(d.severity, d.message, d.range) for d in diags]


class TestScenarios:
    def test_defined_user_with_example_only_warns_unused(self):
        diags = diagnose('define user greet\n"hi"\n')
        assert summary(diags) == [
            (WARNING, "User 'greet' is declared but never used", rng(0, 12, 17)),
        ]

    def test_undefined_user(self):
        diags = diagnose('user greet\n')
        assert summary(diags) == [(ERROR, "User 'greet' does not exist", rng(0, 5, 10))]

    def test_flow_is_never_unused(self):
        diags = diagnose('define flow f1\nuser greet\n')
        assert summary(diags) == [(ERROR, "User 'greet' does not exist", rng(1, 5, 10))]

    def test_assigned_and_used_variable(self):
        assert diagnose('$x = 1\nif $x\n') == []

    def test_duplicate_bot(self):
        diags = diagnose('define bot greet\ndefine bot greet\n')
        errors = [(d.message, d.range) for d in diags if d.severity == ERROR]
        assert errors == [
            ('Duplicate bot definition', rng(0, 11, 16)),
            ('Duplicate bot definition', rng(1, 11, 16)),
        ]

    def test_unknown_line(self):
        diags = diagnose('%%%')
        assert summary(diags) == [(ERROR, 'Unknown line', rng(0, 0, 3))]


class TestEntityRules:
    def test_undefined_reported_per_reference(self):
        diags = diagnose('bot hello\n  bot hello\n')
        assert summary(diags) == [
            (ERROR, "Bot 'hello' does not exist", rng(0, 4, 9)),
            (ERROR, "Bot 'hello' does not exist", rng(1, 6, 11)),
        ]

    def test_unused_user(self):
        diags = diagnose('define user greet')
        assert summary(diags) == [
            (WARNING, "User 'greet' is declared but never used", rng(0, 12, 17)),
        ]

    def test_unused_subflow(self):
        diags = diagnose('define subflow wrap up')
        assert summary(diags) == [
            (WARNING, "Subflow 'wrap up' is declared but never used", rng(0, 15, 22)),
        ]

    def test_do_references_subflow(self):
        assert diagnose('define subflow wrap up\ndo wrap up') == []

    def test_do_without_subflow(self):
        diags = diagnose('do wrap up')
        assert summary(diags) == [(ERROR, "Subflow 'wrap up' does not exist", rng(0, 3, 10))]

    def test_when_user_is_a_reference(self):
        assert diagnose('define user hi\nwhen user hi\nelse when user hi') == []

    def test_duplicate_and_unused_both_reported(self):
        diags = diagnose('define user a\ndefine user a')
        assert [d.message for d in diags] == [
            'Duplicate user definition',
            'Duplicate user definition',
            "User 'a' is declared but never used",
            "User 'a' is declared but never used",
        ]

    def test_duplicate_flow_is_reported(self):
        diags = diagnose('define flow main\ndefine flow main')
        assert [d.message for d in diags] == ['Duplicate flow definition'] * 2

    def test_variable_reassignment_is_legal(self):
        assert diagnose('$x = 1\n$x = 2\nif $x') == []

    def test_unused_variable(self):
        diags = diagnose('$x = 1')
        assert summary(diags) == [
            (WARNING, "Variable 'x' is declared but never used", rng(0, 1, 2)),
        ]

    def test_undefined_variable_in_message(self):
        diags = diagnose('"hello $name"')
        assert summary(diags) == [(ERROR, "Variable 'name' does not exist", rng(0, 8, 12))]

    def test_right_hand_side_references(self):
        diags = diagnose('$a = 1\n$b = $a\n"$b"')
        assert diags == []

    def test_attribute_access_uses_the_assigned_name(self):
        assert diagnose('$x.y = 1\nif $x.y') == []

    def test_adjacent_token_after_assigned_name_is_a_reference(self):
        diags = diagnose('$a$b = 1\n"$b $a"')
        assert summary(diags) == [
            (ERROR, "Variable 'b' does not exist", rng(0, 3, 4)),
            (ERROR, "Variable 'b' does not exist", rng(1, 2, 3)),
        ]

    def test_same_name_different_kinds_are_independent(self):
        diags = diagnose('define user greet\nbot greet')
        assert [d.message for d in diags] == [
            "User 'greet' is declared but never used",
            "Bot 'greet' does not exist",
        ]

    def test_every_diagnostic_has_source(self):
        diags = diagnose('user a\nbot b\n%%%')
        assert diags
        assert all(d.source == 'colsp' for d in diags)


class TestUnknownLines:
    def test_blank_and_bare_else_are_silent(self):
        assert diagnose('\n   \nelse\n  else  \n') == []

    def test_comments_are_silent(self):
        assert diagnose('# just a note $x') == []

    def test_define_without_name(self):
        diags = diagnose('define user')
        assert summary(diags) == [(ERROR, 'Unknown line', rng(0, 0, 11))]

    def test_named_line_without_name(self):
        diags = diagnose('  user')
        assert summary(diags) == [(ERROR, 'Unknown line', rng(0, 0, 6))]

    def test_when_without_user(self):
        diags = diagnose('when bot speaks')
        assert summary(diags) == [(ERROR, 'Unknown line', rng(0, 0, 15))]

    def test_assignment_without_name_still_references(self):
        diags = diagnose('$ = $y')
        assert summary(diags) == [
            (ERROR, "Variable 'y' does not exist", rng(0, 5, 6)),
            (ERROR, 'Unknown line', rng(0, 0, 6)),
        ]

    def test_unknown_lines_come_last(self):
        diags = diagnose('%%%\nuser greet')
        assert [d.message for d in diags] == ["User 'greet' does not exist", 'Unknown line']

    def test_one_bad_line_does_not_hide_others(self):
        diags = diagnose('define user greet\n???\nuser greet\n!!!')
        assert [(d.message, d.range.start.line) for d in diags] == [
            ('Unknown line', 1),
            ('Unknown line', 3),
        ]


class TestBuildIndex:
    def test_tables(self):
        doc = parse_document(URI, 'define user greet\nuser greet\n$x = $y')
        index = build_index(doc)
        greet = index.tables[EntityType.USER]['greet']
        assert len(greet.definitions) == 1
        assert len(greet.references) == 1
        assert [r.name for r in index.tables[EntityType.VARIABLE]['x'].definitions] == ['x']
        assert index.tables[EntityType.VARIABLE]['x'].references == []
        assert [r.range for r in index.tables[EntityType.VARIABLE]['y'].references] == [rng(2, 6, 7)]
        assert index.tables[EntityType.BOT] == {}
        assert index.unknown == []

    def test_demoted_lines_become_unknown(self):
        index = build_index(parse_document(URI, 'bot\n\n'))
        assert all(isinstance(line, UnknownLine) for line in index.unknown)
        assert [line.line_number for line in index.unknown] == [0, 1, 2]
        assert [line.reportable for line in index.unknown] == [True, False, False]

    def test_fresh_index_per_call(self):
        doc = parse_document(URI, 'user greet')
        first, second = build_index(doc), build_index(doc)
        assert first is not second
        assert first.tables[EntityType.USER] is not second.tables[EntityType.USER]
        assert get_diagnostics(doc) == get_diagnostics(doc)

    def test_empty_document(self):
        doc = parse_document(URI, '')
        assert build_index(doc).unknown == []
        assert get_diagnostics(doc) == []
