"""Interface for result reporting."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from prosecheck.domain.entities import BatchResult


class ResultFormatter(Protocol):
    """Protocol for rendering a BatchResult as text."""

    name: str

    def render(self, batch: "BatchResult") -> str:
        """Render the whole batch. Returns '' when there is nothing to print."""
        ...
