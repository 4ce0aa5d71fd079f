"""Use Case: lint (or fix) files on disk."""

import logging
from collections.abc import Sequence
from typing import Optional

from prosecheck.domain.constants import DEFAULT_DISCOVERY_PATTERNS, READ_ERROR_RULE_ID
from prosecheck.domain.descriptor import Descriptor
from prosecheck.domain.entities import BatchResult, DocumentResult, LintMode, SourceDocument
from prosecheck.domain.protocols import FileSystemProtocol, TelemetryPort
from prosecheck.use_cases.session_runner import SessionRunner

logger = logging.getLogger(__name__)


class LintFilesUseCase:
    """Discover files, read them, hand them to the Session Runner, persist fixed output."""

    def __init__(
        self,
        filesystem: FileSystemProtocol,
        runner: SessionRunner,
        telemetry: Optional[TelemetryPort] = None,
        patterns: tuple[str, ...] = DEFAULT_DISCOVERY_PATTERNS,
    ) -> None:
        self.filesystem = filesystem
        self.runner = runner
        self.telemetry = telemetry
        self.patterns = patterns

    def execute(
        self, descriptor: Descriptor, paths: Sequence[str], mode: LintMode = LintMode.LINT
    ) -> BatchResult:
        files = self.discover(paths)
        sources: list[SourceDocument] = []
        unreadable: dict[int, DocumentResult] = {}
        for index, path in enumerate(files):
            try:
                text = self.filesystem.read_text(path)
            except (OSError, UnicodeDecodeError) as exc:
                logger.info("Cannot read %s: %s", path, exc)
                unreadable[index] = DocumentResult.failure(path, READ_ERROR_RULE_ID, f"Cannot read file: {exc}")
                continue
            sources.append(SourceDocument(id=path, text=text, kind=self.kind_for(descriptor, path)))

        batch = self.runner.run(descriptor, sources, mode)
        linted = iter(batch)
        results = [unreadable[i] if i in unreadable else next(linted) for i in range(len(files))]

        if mode is LintMode.FIX:
            for result in batch.fixed_documents:
                self.filesystem.write_text(result.document_id, result.fixed_text or "")
                if self.telemetry:
                    self.telemetry.step(f"Fixed {result.document_id} ({len(result.applied)} change(s))")
        return BatchResult.of(results)

    def discover(self, paths: Sequence[str]) -> list[str]:
        """Expand directories with the discovery patterns; explicit files are kept as given."""
        files: list[str] = []
        seen: set[str] = set()
        for path in paths or ["."]:
            for found in self.filesystem.discover_files(path, self.patterns):
                if found not in seen:
                    seen.add(found)
                    files.append(found)
        logger.debug("Discovered %d file(s)", len(files))
        return files

    def kind_for(self, descriptor: Descriptor, path: str) -> str:
        """Kind of the plugin declaring the file's extension, else the bare extension."""
        suffix = self.filesystem.get_suffix(path)
        return descriptor.kind_for_extension(suffix) or suffix.lstrip(".") or "unknown"
