"""Messages, patches and results produced by the kernel."""

import dataclasses
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from prosecheck.domain.document import Position, SourceLocation, TextRange


class Severity(Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @classmethod
    def parse(cls, value: "str | Severity") -> "Severity":
        """Accept a Severity or its name ('error', 'Warning', ...)."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            allowed = ", ".join(s.value for s in cls)
            raise ValueError(f"Unknown severity '{value}' (expected one of: {allowed})") from None


class LintMode(Enum):
    LINT = "lint"
    FIX = "fix"


@dataclass(frozen=True)
class Patch:
    """Replace ``range`` of the current text with ``replacement``."""

    range: TextRange
    replacement: str

    @classmethod
    def delete(cls, text_range: TextRange) -> "Patch":
        return cls(range=text_range, replacement="")

    @classmethod
    def insert(cls, offset: int, text: str) -> "Patch":
        return cls(range=TextRange(offset, offset), replacement=text)

    def is_noop(self, text: str) -> bool:
        return text[self.range.start:self.range.end] == self.replacement

    def conflicts_with(self, other: "Patch") -> bool:
        return self.range.overlaps(other.range)

    def to_dict(self) -> dict[str, Any]:
        return {"range": [self.range.start, self.range.end], "text": self.replacement}


@dataclass(frozen=True)
class Message:
    """A diagnostic. ``range`` is valid against the document version it was produced from."""

    rule_id: str
    severity: Severity
    range: TextRange
    text: str
    fix: Optional[Patch] = None
    loc: Optional[SourceLocation] = None
    """Start/end positions, stamped by the kernel for formatters."""

    @property
    def fixable(self) -> bool:
        return self.fix is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ruleId": self.rule_id,
            "severity": self.severity.value,
            "message": self.text,
            "range": [self.range.start, self.range.end],
        }
        if self.loc is not None:
            data["line"] = self.loc.start.line
            data["column"] = self.loc.start.column
            data["endLine"] = self.loc.end.line
            data["endColumn"] = self.loc.end.column
        if self.fix is not None:
            data["fix"] = self.fix.to_dict()
        return data


@dataclass(frozen=True)
class SourceDocument:
    """Input triple handed to the session runner."""

    id: str
    text: str
    kind: str


@dataclass(frozen=True)
class DocumentResult:
    document_id: str
    messages: tuple[Message, ...] = ()
    fixed_text: Optional[str] = None
    fix_applied: bool = False
    applied: tuple[Message, ...] = ()
    """Messages whose patches were applied, across all fix iterations."""
    fix_iterations: int = 0

    @classmethod
    def failure(
        cls, document_id: str, rule_id: str, text: str, position: Optional[Position] = None
    ) -> "DocumentResult":
        """A result holding a single error message, located at position or 1:1, and no fix output."""
        at = position or Position(1, 1)
        message = Message(
            rule_id=rule_id,
            severity=Severity.ERROR,
            range=TextRange(0, 0),
            text=text,
            loc=SourceLocation(at, at),
        )
        return cls(document_id=document_id, messages=(message,))

    def with_messages(self, messages: Iterable[Message]) -> "DocumentResult":
        return dataclasses.replace(self, messages=tuple(messages))

    def count(self, severity: Severity) -> int:
        return sum(1 for m in self.messages if m.severity is severity)

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    @property
    def info_count(self) -> int:
        return self.count(Severity.INFO)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "filePath": self.document_id,
            "messages": [m.to_dict() for m in self.messages],
            "fixApplied": self.fix_applied,
            "appliedCount": len(self.applied),
        }
        if self.fixed_text is not None:
            data["output"] = self.fixed_text
        return data


@dataclass(frozen=True)
class BatchResult:
    """One DocumentResult per input document, in input order."""

    results: tuple[DocumentResult, ...] = ()

    def __iter__(self):
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index: int) -> DocumentResult:
        return self.results[index]

    @classmethod
    def of(cls, results: Sequence[DocumentResult]) -> "BatchResult":
        return cls(results=tuple(results))

    @property
    def error_count(self) -> int:
        return sum(r.error_count for r in self.results)

    @property
    def warning_count(self) -> int:
        return sum(r.warning_count for r in self.results)

    @property
    def info_count(self) -> int:
        return sum(r.info_count for r in self.results)

    @property
    def message_count(self) -> int:
        return sum(len(r.messages) for r in self.results)

    @property
    def applied_count(self) -> int:
        return sum(len(r.applied) for r in self.results)

    @property
    def fixed_documents(self) -> tuple[DocumentResult, ...]:
        return tuple(r for r in self.results if r.fixed_text is not None)

    def has_errors(self) -> bool:
        return self.error_count > 0

    def to_dict(self) -> list[dict[str, Any]]:
        return [r.to_dict() for r in self.results]
