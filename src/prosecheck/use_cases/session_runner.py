"""Use Case: run a Descriptor over a batch of documents."""

import logging
import queue
import threading
import time
from collections.abc import Sequence
from typing import Optional, Union, cast

from prosecheck.domain.constants import (
    DEFAULT_MAX_FIX_ITERATIONS,
    INTERNAL_ERROR_RULE_ID,
    PARSE_ERROR_RULE_ID,
    TIMEOUT_RULE_ID,
    UNSUPPORTED_KIND_RULE_ID,
)
from prosecheck.domain.descriptor import Descriptor, RuleDescriptor
from prosecheck.domain.document import Document
from prosecheck.domain.entities import (
    BatchResult,
    DocumentResult,
    LintMode,
    Message,
    SourceDocument,
)
from prosecheck.domain.errors import ParseError, RuleExecutionError, UnsupportedKindError
from prosecheck.domain.protocols import TelemetryPort
from prosecheck.use_cases.execution_kernel import DocumentOutcome, ExecutionKernel

logger = logging.getLogger(__name__)

Outcome = Union[DocumentOutcome, DocumentResult]


class SessionRunner:
    """
    Dispatches each document to the Execution Kernel and aggregates the results.

    One failing document never aborts the batch: unsupported kinds, parse
    failures, timeouts and unexpected exceptions each become a DocumentResult
    holding a single error message. Results always follow input order, also
    when ``workers > 1`` runs documents on worker threads.
    """

    def __init__(
        self,
        max_fix_iterations: int = DEFAULT_MAX_FIX_ITERATIONS,
        workers: int = 1,
        timeout: Optional[float] = None,
        telemetry: Optional[TelemetryPort] = None,
    ) -> None:
        if workers < 1:
            raise ValueError("workers must be at least 1")
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self.max_fix_iterations = max_fix_iterations
        self.workers = workers
        self.timeout = timeout
        self.telemetry = telemetry

    def run(
        self,
        descriptor: Descriptor,
        documents: Sequence[SourceDocument],
        mode: LintMode = LintMode.LINT,
    ) -> BatchResult:
        kernel = ExecutionKernel(descriptor, self.max_fix_iterations)
        if self.telemetry:
            self.telemetry.step(f"Checking {len(documents)} document(s) in {mode.value} mode")

        if documents and (self.workers > 1 or self.timeout is not None):
            outcomes = self._run_pool(kernel, documents, mode)
        else:
            outcomes = [self._run_one(kernel, source, mode) for source in documents]

        session_messages = self._run_session_rules(descriptor, outcomes)
        results: list[DocumentResult] = []
        for outcome in outcomes:
            if isinstance(outcome, DocumentOutcome):
                extra = session_messages.get(outcome.result.document_id, [])
                results.append(kernel.merge(outcome, extra) if extra else outcome.result)
            else:
                results.append(outcome)

        batch = BatchResult.of(results)
        if self.telemetry:
            self.telemetry.step(
                f"Done: {batch.error_count} error(s), {batch.warning_count} warning(s), "
                f"{batch.applied_count} fix(es) applied"
            )
        return batch

    def _run_one(self, kernel: ExecutionKernel, source: SourceDocument, mode: LintMode) -> Outcome:
        try:
            return kernel.run(source, mode)
        except UnsupportedKindError as exc:
            logger.info("Skipping %s: %s", source.id, exc)
            return DocumentResult.failure(source.id, UNSUPPORTED_KIND_RULE_ID, str(exc))
        except ParseError as exc:
            logger.info("Could not parse %s: %s", source.id, exc)
            return DocumentResult.failure(
                source.id, PARSE_ERROR_RULE_ID, f"Parsing failed: {exc}", exc.location
            )
        except Exception as exc:
            logger.exception("Unexpected failure while processing %s", source.id)
            if self.telemetry:
                self.telemetry.error(f"Internal error on {source.id}: {exc}")
            return DocumentResult.failure(
                source.id, INTERNAL_ERROR_RULE_ID, f"Internal error: {type(exc).__name__}: {exc}"
            )

    def _run_pool(
        self, kernel: ExecutionKernel, documents: Sequence[SourceDocument], mode: LintMode
    ) -> list[Outcome]:
        """
        Run documents on at most ``workers`` daemon threads.

        The timeout of a document counts from the moment its thread starts. A
        document that times out gives its slot to the next one in the queue;
        its thread is abandoned and never blocks interpreter exit.
        """
        outcomes: list[Optional[Outcome]] = [None] * len(documents)
        finished: "queue.Queue[tuple[int, Outcome]]" = queue.Queue()
        running: dict[int, float] = {}
        pending = iter(enumerate(documents))
        exhausted = False

        while not exhausted or running:
            while not exhausted and len(running) < self.workers:
                item = next(pending, None)
                if item is None:
                    exhausted = True
                    break
                index, source = item
                running[index] = self._start(index, kernel, source, mode, finished)
            if not running:
                break
            try:
                index, outcome = finished.get(timeout=self._wait_time(running))
            except queue.Empty:
                self._expire(documents, running, outcomes)
                continue
            if running.pop(index, None) is not None:
                outcomes[index] = outcome
        return cast(list[Outcome], outcomes)

    def _start(
        self,
        index: int,
        kernel: ExecutionKernel,
        source: SourceDocument,
        mode: LintMode,
        finished: "queue.Queue[tuple[int, Outcome]]",
    ) -> float:
        def work() -> None:
            finished.put((index, self._run_one(kernel, source, mode)))

        threading.Thread(target=work, name=f"prosecheck-{index}", daemon=True).start()
        return time.monotonic() + self.timeout if self.timeout is not None else float("inf")

    @staticmethod
    def _wait_time(running: dict[int, float]) -> Optional[float]:
        deadline = min(running.values())
        if deadline == float("inf"):
            return None
        return max(deadline - time.monotonic(), 0.0)

    def _expire(
        self,
        documents: Sequence[SourceDocument],
        running: dict[int, float],
        outcomes: list[Optional[Outcome]],
    ) -> None:
        now = time.monotonic()
        for index in [i for i, deadline in running.items() if deadline <= now]:
            del running[index]
            source = documents[index]
            logger.warning("Timed out after %ss: %s", self.timeout, source.id)
            if self.telemetry:
                self.telemetry.warning(f"Timed out: {source.id}")
            outcomes[index] = DocumentResult.failure(
                source.id, TIMEOUT_RULE_ID, f"Processing exceeded the {self.timeout}s time limit."
            )

    def _run_session_rules(
        self, descriptor: Descriptor, outcomes: Sequence[Outcome]
    ) -> dict[str, list[Message]]:
        """Run cross-document rules over every document that parsed; failures stay per rule."""
        parsed: list[Document] = [o.document for o in outcomes if isinstance(o, DocumentOutcome)]
        collected: dict[str, list[Message]] = {}
        if not parsed:
            return collected
        for rd in descriptor.session_rules:
            for document_id, messages in self._evaluate_session_rule(rd, parsed).items():
                collected.setdefault(document_id, []).extend(messages)
        return collected

    @staticmethod
    def _evaluate_session_rule(
        rd: RuleDescriptor, documents: Sequence[Document]
    ) -> dict[str, list[Message]]:
        by_id = {d.id: d for d in documents}
        try:
            produced = rd.unit.evaluate_batch(documents, rd.context()) or {}
            checked: dict[str, list[Message]] = {}
            for document_id, messages in produced.items():
                document = by_id.get(document_id)
                if document is None:
                    raise RuleExecutionError(rd.rule_id, f"reported unknown document '{document_id}'")
                checked[document_id] = ExecutionKernel.check_messages(
                    rd.rule_id, document, list(messages)
                )
            return checked
        except RuleExecutionError as exc:
            failure = exc
        except Exception as exc:
            failure = RuleExecutionError(rd.rule_id, f"{type(exc).__name__}: {exc}")
            logger.debug("Session rule %s raised", rd.rule_id, exc_info=True)
        logger.warning("%s", failure)
        message = ExecutionKernel.rule_failure(failure)
        return {d.id: [message] for d in documents}
