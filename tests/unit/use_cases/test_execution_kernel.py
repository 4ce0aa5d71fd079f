"""Unit tests for ExecutionKernel: lint ordering, rule isolation and the fix loop."""

import pytest

from prosecheck.domain.constants import FIX_LIMIT_RULE_ID, FIX_UNSAFE_RULE_ID
from prosecheck.domain.document import Document, NodeType, Position, TextRange
from prosecheck.domain.entities import LintMode, Message, Patch, Severity, SourceDocument
from prosecheck.domain.errors import ParseError, UnsupportedKindError
from prosecheck.domain.rules import RuleContext
from prosecheck.domain.rules.no_emoji import NoEmojiRule
from prosecheck.domain.rules.no_trailing_spaces import NoTrailingSpacesRule
from prosecheck.use_cases.execution_kernel import ExecutionKernel, PatchSet
from tests.rule_test_utils import FunctionRule, descriptor_for


def _source(text: str, kind: str = "markdown", document_id: str = "doc.md") -> SourceDocument:
    return SourceDocument(id=document_id, text=text, kind=kind)


def _kernel(*units: object, max_fix_iterations: int = 10) -> ExecutionKernel:
    return ExecutionKernel(descriptor_for(*units), max_fix_iterations=max_fix_iterations)


class TestLintMode:
    def test_no_emoji_reports_one_warning(self) -> None:
        result = _kernel(NoEmojiRule()).lint(_source("Hello 🎉 world"))

        assert result.document_id == "doc.md"
        assert len(result.messages) == 1
        message = result.messages[0]
        assert message.rule_id == "no-emoji"
        assert message.severity is Severity.WARNING
        assert message.range == TextRange(6, 7)
        assert message.loc.start == Position(1, 7)
        assert result.fix_applied is False
        assert result.fixed_text is None

    def test_messages_sorted_by_offset_then_rule_order(self) -> None:
        def at(*offsets: int):
            def evaluate(document: Document, context: RuleContext):
                return [context.report(TextRange(o, o), f"at {o}") for o in offsets]
            return evaluate

        result = _kernel(FunctionRule("first", at(4, 0)), FunctionRule("second", at(0, 2))).lint(
            _source("some text")
        )
        assert [(m.range.start, m.rule_id) for m in result.messages] == [
            (0, "first"),
            (0, "second"),
            (2, "second"),
            (4, "first"),
        ]

    def test_severity_comes_from_context(self) -> None:
        def evaluate(document: Document, context: RuleContext):
            yield context.report(TextRange(0, 1), "x")
            yield context.report(TextRange(0, 1), "y", severity=Severity.INFO)

        result = _kernel(FunctionRule("sev", evaluate, default_severity=Severity.ERROR)).lint(_source("abc"))
        assert [m.severity for m in result.messages] == [Severity.ERROR, Severity.INFO]

    def test_unsupported_kind_and_parse_error_propagate(self) -> None:
        kernel = _kernel(NoEmojiRule())
        with pytest.raises(UnsupportedKindError):
            kernel.lint(_source("a,b", kind="csv"))
        with pytest.raises(ParseError):
            kernel.lint(_source("```\nopen fence\n"))


class TestRuleIsolation:
    def test_raising_rule_becomes_single_error_and_others_still_run(self) -> None:
        def explode(document: Document, context: RuleContext):
            raise RuntimeError("boom")

        result = _kernel(FunctionRule("exploding", explode), NoEmojiRule()).lint(_source("Hi 🎉"))

        assert [(m.rule_id, m.severity) for m in result.messages] == [
            ("exploding", Severity.ERROR),
            ("no-emoji", Severity.WARNING),
        ]
        assert result.messages[0].text == "Rule 'exploding' failed: RuntimeError: boom"

    def test_out_of_range_message_is_rule_failure(self) -> None:
        def stray(document: Document, context: RuleContext):
            return [context.report(TextRange(0, 999), "far away")]

        result = _kernel(FunctionRule("stray", stray)).lint(_source("short"))
        assert len(result.messages) == 1
        assert result.messages[0].severity is Severity.ERROR
        assert "outside the document" in result.messages[0].text

    def test_out_of_range_fix_is_rule_failure(self) -> None:
        def stray_fix(document: Document, context: RuleContext):
            return [context.report(TextRange(0, 1), "bad fix", fix=Patch.delete(TextRange(3, 50)))]

        result = _kernel(FunctionRule("stray-fix", stray_fix)).fix(_source("short"))
        assert result.fix_applied is False
        assert "fix range [3, 50)" in result.messages[0].text

    def test_messages_are_attributed_to_the_descriptor_rule_id(self) -> None:
        def impostor(document: Document, context: RuleContext):
            return [Message("someone-else", Severity.INFO, TextRange(0, 1), "hi")]

        result = _kernel(FunctionRule("real-id", impostor)).lint(_source("text"))
        assert result.messages[0].rule_id == "real-id"


class TestFixMode:
    def test_no_emoji_fix(self) -> None:
        result = _kernel(NoEmojiRule()).fix(_source("Hello 🎉 world"))

        assert result.fixed_text == "Hello  world"
        assert result.fix_applied is True
        assert result.messages == ()
        assert result.fix_iterations == 1
        assert [m.rule_id for m in result.applied] == ["no-emoji"]

    def test_fix_is_idempotent(self) -> None:
        kernel = _kernel(NoEmojiRule(), NoTrailingSpacesRule())
        first = kernel.fix(_source("Ship it 🚀  \nDone 🎉\n"))
        assert first.fixed_text == "Ship it\nDone\n"
        assert first.fix_iterations == 2

        second = kernel.fix(_source(first.fixed_text))
        assert second.fix_applied is False
        assert second.fixed_text is None
        assert second.messages == ()

    def test_overlapping_patch_waits_for_next_pass(self) -> None:
        def greet(document: Document, context: RuleContext):
            if document.source_text.startswith("Hello"):
                yield context.report(TextRange(0, 5), "greet", fix=Patch(TextRange(0, 5), "Howdy"))

        def yell(document: Document, context: RuleContext):
            yield context.report(TextRange(0, 3), "yell", fix=Patch(TextRange(0, 3), "Yel"))

        result = _kernel(FunctionRule("greet", greet), FunctionRule("yell", yell)).fix(_source("Hello world"))

        assert result.fixed_text == "Yeldy world"
        assert result.fix_iterations == 2
        assert [m.rule_id for m in result.applied] == ["greet", "yell"]
        # the converged yell patch is a no-op; its message is still reported
        assert [m.rule_id for m in result.messages] == ["yell"]

    def test_unparseable_fix_is_rolled_back(self) -> None:
        def drop_closing_fence(document: Document, context: RuleContext):
            for block in document.nodes_of_type(NodeType.CODE_BLOCK):
                closing = [c for c in block.children if c.type == NodeType.SYNTAX][-1]
                yield context.report(closing.range, "drop fence", fix=Patch.delete(closing.range))

        text = "```\ncode\n```\n"
        result = _kernel(FunctionRule("drop-fence", drop_closing_fence)).fix(_source(text))

        assert result.fix_applied is False
        assert result.fixed_text is None
        assert [(m.rule_id, m.range.start) for m in result.messages] == [
            (FIX_UNSAFE_RULE_ID, 0),
            ("drop-fence", 9),
        ]
        assert result.messages[0].severity is Severity.ERROR

    def test_iteration_cap(self) -> None:
        def shout(document: Document, context: RuleContext):
            end = len(document.source_text)
            yield context.report(TextRange(end, end), "more!", fix=Patch.insert(end, "!"))

        result = _kernel(FunctionRule("shout", shout), max_fix_iterations=3).fix(_source("a"))

        assert result.fixed_text == "a!!!"
        assert result.fix_applied is True
        assert result.fix_iterations == 3
        limit = [m for m in result.messages if m.rule_id == FIX_LIMIT_RULE_ID]
        assert len(limit) == 1
        assert limit[0].severity is Severity.WARNING

    def test_run_returns_final_document(self) -> None:
        outcome = _kernel(NoEmojiRule()).run(_source("Go 🚀"), LintMode.FIX)
        assert outcome.document.source_text == "Go "
        assert outcome.result.fixed_text == "Go "

    def test_cap_must_be_positive(self) -> None:
        with pytest.raises(ValueError):
            _kernel(NoEmojiRule(), max_fix_iterations=0)


class TestPatchSet:
    def _message(self, start: int, end: int, replacement: str, rule_id: str = "r") -> Message:
        return Message(rule_id, Severity.WARNING, TextRange(start, end), "m", fix=Patch(TextRange(start, end), replacement))

    def test_select_prefers_earlier_rule_at_same_start(self) -> None:
        first = self._message(2, 4, "X", "first")
        second = self._message(2, 3, "Y", "second")
        accepted = PatchSet.select([(1, second), (0, first)], "abcdef")
        assert accepted == [first]

    def test_select_skips_noops(self) -> None:
        assert PatchSet.select([(0, self._message(0, 2, "ab"))], "abcdef") == []

    def test_apply_non_overlapping_patches(self) -> None:
        patches = [Patch(TextRange(0, 1), "A"), Patch.delete(TextRange(2, 3)), Patch.insert(6, "!")]
        assert PatchSet.apply("abcdef", patches) == "Abdef!"
