"""Rule unit contracts and the context handed to a rule during evaluation."""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional, Protocol, runtime_checkable

from prosecheck.domain.document import TextRange
from prosecheck.domain.entities import Message, Patch, Severity
from prosecheck.domain.errors import InvalidOptionsError

__all__ = [
    "OptionChecks",
    "RuleContext",
    "RuleUnit",
    "SessionRule",
]

if TYPE_CHECKING:
    from prosecheck.domain.document import Document


@dataclass(frozen=True)
class RuleContext:
    """
    What a rule sees besides the document: its id in the descriptor, its
    options exactly as configured, the settings its option check returned,
    and the effective severity.
    """

    rule_id: str
    options: Any
    settings: Any
    severity: Severity

    def report(
        self,
        text_range: TextRange,
        text: str,
        fix: Optional[Patch] = None,
        severity: Optional[Severity] = None,
    ) -> Message:
        """Build a message attributed to this rule."""
        return Message(
            rule_id=self.rule_id,
            severity=severity or self.severity,
            range=text_range,
            text=text,
            fix=fix,
        )


class OptionChecks:
    """Checks shared by the validate_options implementations."""

    @staticmethod
    def table(rule_id: str, options: Any, allowed: set[str]) -> Mapping[str, Any]:
        """Options as a table holding only allowed keys, so a misspelled key fails the build."""
        if not isinstance(options, dict):
            raise InvalidOptionsError("options must be a table", rule_id)
        unknown = set(options) - allowed
        if unknown:
            raise InvalidOptionsError(f"unknown option(s): {', '.join(sorted(unknown))}", rule_id)
        return options


# -----------------------------------------------------------------------------
# Rule protocols: RuleUnit (one document at a time) and SessionRule (the whole
# batch). A unit must not keep state across documents; anything it needs to set
# up once lives in the settings returned by validate_options.
# -----------------------------------------------------------------------------


@runtime_checkable
class RuleUnit(Protocol):
    """Per-document diagnostic and fix producer."""

    rule_id: str
    description: str
    default_severity: Severity
    fixable: bool

    def validate_options(self, options: Any) -> Any:
        """
        Check options at descriptor construction and return normalized settings.

        Raises:
            InvalidOptionsError: options are not acceptable for this rule.
        """
        ...

    def evaluate(self, document: "Document", context: RuleContext) -> Iterable[Message]:
        """Inspect one document and return messages, optionally carrying a Patch."""
        ...


@runtime_checkable
class SessionRule(Protocol):
    """Batch-level rule for cross-document checks. Never proposes fixes."""

    rule_id: str
    description: str
    default_severity: Severity

    def validate_options(self, options: Any) -> Any:
        ...

    def evaluate_batch(
        self, documents: Sequence["Document"], context: RuleContext
    ) -> Mapping[str, Sequence[Message]]:
        """Return messages keyed by document id."""
        ...
