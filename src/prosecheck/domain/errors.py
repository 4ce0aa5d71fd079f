"""Error taxonomy. Configuration-time errors are raised; document and rule errors become messages."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from prosecheck.domain.document import Position


class ProsecheckError(Exception):
    """Base class for every error raised by prosecheck."""


class ConfigurationError(ProsecheckError):
    """Unreadable or malformed configuration, or an unknown rule/plugin/preset id."""


class DescriptorValidationError(ProsecheckError):
    """Descriptor construction failed. Lists every violation found, not just the first."""

    def __init__(self, violations: Sequence[str]) -> None:
        self.violations: tuple[str, ...] = tuple(violations)
        summary = "; ".join(self.violations)
        super().__init__(f"Invalid descriptor ({len(self.violations)} problem(s)): {summary}")


class DuplicatePluginError(DescriptorValidationError):
    """Two plugins claim the same document kind."""


class InvalidOptionsError(ProsecheckError):
    """A rule unit rejected its options."""

    def __init__(self, reason: str, rule_id: Optional[str] = None) -> None:
        self.reason = reason
        self.rule_id = rule_id
        super().__init__(f"{rule_id}: {reason}" if rule_id else reason)


class DocumentError(ProsecheckError):
    """Failure local to one document. Recovered by the session runner."""


class UnsupportedKindError(DocumentError):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"No format plugin is bound for kind '{kind}'")


class ParseError(DocumentError):
    """A format plugin could not produce a tree. ``location`` is set when known."""

    def __init__(self, message: str, location: Optional["Position"] = None) -> None:
        self.location = location
        super().__init__(f"{message} (at {location})" if location else message)


class RuleExecutionError(ProsecheckError):
    """A rule unit failed during evaluation. Isolated to that rule."""

    def __init__(self, rule_id: str, reason: str) -> None:
        self.rule_id = rule_id
        self.reason = reason
        super().__init__(f"Rule '{rule_id}' failed: {reason}")
