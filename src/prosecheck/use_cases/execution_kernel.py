"""Use Case: lint or fix one document against a Descriptor."""

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional

from prosecheck.domain.constants import (
    DEFAULT_MAX_FIX_ITERATIONS,
    FIX_LIMIT_RULE_ID,
    FIX_UNSAFE_RULE_ID,
)
from prosecheck.domain.descriptor import Descriptor, RuleDescriptor
from prosecheck.domain.document import Document, TextRange
from prosecheck.domain.entities import (
    DocumentResult,
    LintMode,
    Message,
    Patch,
    Severity,
    SourceDocument,
)
from prosecheck.domain.errors import ParseError, RuleExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentOutcome:
    """Kernel output plus the final parsed document, which session rules inspect."""

    result: DocumentResult
    document: Document


class PatchSet:
    """Conflict policy and application of patches proposed in one fix pass."""

    @staticmethod
    def select(candidates: Sequence[tuple[int, Message]], text: str) -> list[Message]:
        """
        Accept patches in (patch start, rule order) order, dropping any patch that
        overlaps one already accepted in this pass. No-op patches are ignored.

        Args:
            candidates: (rule execution order, message carrying a fix) pairs.
            text: the text the patches were proposed against.
        """
        ordered = sorted(candidates, key=lambda c: (c[1].fix.range.start, c[0]))
        accepted: list[Message] = []
        for _, message in ordered:
            patch = message.fix
            if patch.is_noop(text):
                continue
            clash = next((a for a in accepted if patch.conflicts_with(a.fix)), None)
            if clash is not None:
                logger.debug(
                    "Dropping patch from %s at [%d, %d): overlaps patch from %s",
                    message.rule_id,
                    patch.range.start,
                    patch.range.end,
                    clash.rule_id,
                )
                continue
            accepted.append(message)
        return accepted

    @staticmethod
    def apply(text: str, patches: Iterable[Patch]) -> str:
        """Apply non-overlapping patches, last offset first so earlier offsets stay valid."""
        for patch in sorted(patches, key=lambda p: p.range.start, reverse=True):
            text = text[:patch.range.start] + patch.replacement + text[patch.range.end:]
        return text


class ExecutionKernel:
    """
    Runs a Descriptor's document rules over one document.

    Pure over its input: no I/O, no state carried between documents. One
    kernel may serve concurrent documents.
    """

    def __init__(self, descriptor: Descriptor, max_fix_iterations: int = DEFAULT_MAX_FIX_ITERATIONS) -> None:
        if max_fix_iterations < 1:
            raise ValueError("max_fix_iterations must be at least 1")
        self.descriptor = descriptor
        self.max_fix_iterations = max_fix_iterations

    def lint(self, source: SourceDocument) -> DocumentResult:
        return self.run(source, LintMode.LINT).result

    def fix(self, source: SourceDocument) -> DocumentResult:
        return self.run(source, LintMode.FIX).result

    def run(self, source: SourceDocument, mode: LintMode) -> DocumentOutcome:
        """
        Lint or fix one document.

        Raises:
            UnsupportedKindError: no plugin is bound for the document's kind.
            ParseError: the original text cannot be parsed.
        """
        document = self.descriptor.parse(source.id, source.text, source.kind)
        if mode is LintMode.FIX:
            return self._fix(document)
        result = DocumentResult(document_id=document.id, messages=self.evaluate(document))
        return DocumentOutcome(result=result, document=document)

    # -- lint ----------------------------------------------------------------

    def evaluate(self, document: Document) -> tuple[Message, ...]:
        """Run every document rule in descriptor order; return sorted, located messages."""
        messages: list[Message] = []
        for rd in self.descriptor.document_rules:
            messages.extend(self._evaluate_rule(rd, document))
        return self.finalize(document, messages)

    def finalize(self, document: Document, messages: Iterable[Message]) -> tuple[Message, ...]:
        """Stamp line/column locations and stable-sort by (range start, rule order)."""
        located = [
            dataclasses.replace(m, loc=document.range_map.location_of(m.range)) for m in messages
        ]
        located.sort(key=lambda m: (m.range.start, self.descriptor.rule_order(m.rule_id)))
        return tuple(located)

    def merge(self, outcome: DocumentOutcome, extra: Iterable[Message]) -> DocumentResult:
        """Fold messages produced outside the kernel (session rules) into a result."""
        combined = list(outcome.result.messages) + list(extra)
        return outcome.result.with_messages(self.finalize(outcome.document, combined))

    def _evaluate_rule(self, rd: RuleDescriptor, document: Document) -> list[Message]:
        try:
            produced = rd.unit.evaluate(document, rd.context())
            return self.check_messages(rd.rule_id, document, list(produced or ()))
        except RuleExecutionError as exc:
            failure = exc
        except Exception as exc:
            failure = RuleExecutionError(rd.rule_id, f"{type(exc).__name__}: {exc}")
            logger.debug("Rule %s raised on %s", rd.rule_id, document.id, exc_info=True)
        logger.warning("%s (document %s)", failure, document.id)
        return [self.rule_failure(failure)]

    @staticmethod
    def check_messages(rule_id: str, document: Document, produced: Sequence[object]) -> list[Message]:
        """
        Reject output that would corrupt the document: non-messages and ranges
        outside the text. Messages are re-attributed to ``rule_id``.

        Raises:
            RuleExecutionError: on the first invalid item.
        """
        checked: list[Message] = []
        length = len(document.source_text)
        for item in produced:
            if not isinstance(item, Message):
                raise RuleExecutionError(rule_id, f"returned {type(item).__name__} instead of a Message")
            if not document.contains(item.range):
                raise RuleExecutionError(
                    rule_id,
                    f"message range [{item.range.start}, {item.range.end}) is outside the document (length {length})",
                )
            if item.fix is not None and not document.contains(item.fix.range):
                raise RuleExecutionError(
                    rule_id,
                    f"fix range [{item.fix.range.start}, {item.fix.range.end}) is outside the document (length {length})",
                )
            if item.rule_id != rule_id:
                item = dataclasses.replace(item, rule_id=rule_id)
            checked.append(item)
        return checked

    @staticmethod
    def rule_failure(error: RuleExecutionError) -> Message:
        return Message(
            rule_id=error.rule_id,
            severity=Severity.ERROR,
            range=TextRange(0, 0),
            text=str(error),
        )

    # -- fix -----------------------------------------------------------------

    def _fix(self, original: Document) -> DocumentOutcome:
        """
        Fixed-point iteration: lint, accept non-conflicting patches, apply,
        reparse, repeat. Stops on convergence or at max_fix_iterations; rolls
        back to the original text if a pass produces unparseable output.
        """
        original_messages = self.evaluate(original)
        current = original
        messages = original_messages
        applied: list[Message] = []
        iterations = 0
        notice: Optional[Message] = None

        while True:
            candidates = [
                (self.descriptor.rule_order(m.rule_id), m) for m in messages if m.fix is not None
            ]
            accepted = PatchSet.select(candidates, current.source_text)
            if not accepted:
                break
            if iterations >= self.max_fix_iterations:
                logger.warning(
                    "Fix of %s did not converge after %d iteration(s)", original.id, iterations
                )
                notice = Message(
                    rule_id=FIX_LIMIT_RULE_ID,
                    severity=Severity.WARNING,
                    range=TextRange(0, 0),
                    text=(
                        f"Auto-fix stopped after {iterations} iteration(s) without converging; "
                        "fixes may be incomplete."
                    ),
                )
                break

            new_text = PatchSet.apply(current.source_text, [m.fix for m in accepted])
            try:
                candidate = self.descriptor.parse(original.id, new_text, original.kind)
            except ParseError as exc:
                logger.warning("Discarding fixes for %s: fixed output does not parse (%s)", original.id, exc)
                unsafe = Message(
                    rule_id=FIX_UNSAFE_RULE_ID,
                    severity=Severity.ERROR,
                    range=TextRange(0, 0),
                    text=f"Auto-fix skipped: fixed output could not be parsed ({exc}).",
                )
                result = DocumentResult(
                    document_id=original.id,
                    messages=self.finalize(original, list(original_messages) + [unsafe]),
                )
                return DocumentOutcome(result=result, document=original)

            applied.extend(accepted)
            iterations += 1
            current = candidate
            messages = self.evaluate(current)
            logger.debug("Fix pass %d on %s applied %d patch(es)", iterations, original.id, len(accepted))

        final_messages = list(messages)
        if notice is not None:
            final_messages.append(notice)
        fixed_text = current.source_text if current.source_text != original.source_text else None
        result = DocumentResult(
            document_id=original.id,
            messages=self.finalize(current, final_messages),
            fixed_text=fixed_text,
            fix_applied=bool(applied),
            applied=tuple(applied),
            fix_iterations=iterations,
        )
        return DocumentOutcome(result=result, document=current)
