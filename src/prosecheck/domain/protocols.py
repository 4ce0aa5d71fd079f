"""Ports implemented by infrastructure and consumed by the use cases."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional, Protocol

if TYPE_CHECKING:
    from prosecheck.domain.descriptor import AnyRule
    from prosecheck.domain.plugins import FormatPlugin


class TelemetryPort(Protocol):
    """Protocol for telemetry/UI updates."""

    def step(self, message: str) -> None: ...
    def error(self, message: str) -> None: ...
    def warning(self, message: str) -> None: ...
    def handshake(self) -> None: ...


class FileSystemProtocol(Protocol):
    """Protocol for filesystem operations - abstracts Path usage."""

    def discover_files(self, path: str, patterns: tuple[str, ...]) -> list[str]:
        """Files under path matching any glob pattern (path itself if it is a file)."""
        ...

    def get_suffix(self, path: str) -> str:
        """Lower-cased file extension including the dot, or ''."""
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Read text content from a file."""
        ...

    def write_text(self, path: str, content: str, encoding: str = "utf-8") -> None:
        """Write text content to a file."""
        ...


class CapabilityRegistryProtocol(Protocol):
    """Protocol for resolving configured ids to rule units, plugins and presets."""

    def rule(self, rule_id: str) -> "AnyRule":
        """Registered rule unit. Raises ConfigurationError for unknown ids."""
        ...

    def create_plugin(self, plugin_id: str, options: Optional[Mapping[str, Any]] = None) -> "FormatPlugin":
        """New plugin instance. Raises ConfigurationError for unknown ids or bad options."""
        ...

    def preset(self, name: str) -> Mapping[str, Any]:
        """Rule settings of a preset. Raises ConfigurationError for unknown names."""
        ...

    @property
    def plugin_ids(self) -> tuple[str, ...]: ...

    def rules(self) -> list[tuple[str, "AnyRule"]]:
        """Registered (rule id, unit) pairs in registration order."""
        ...


class ConfigSourceProtocol(Protocol):
    """Protocol for reading raw configuration mappings."""

    def load_config_from_fs(self) -> dict[str, object]:
        """The [tool.prosecheck] table of the nearest pyproject.toml, or {}."""
        ...

    def load_file(self, path: str) -> dict[str, object]:
        """Configuration from an explicit file. Raises ConfigurationError."""
        ...


class RuleCatalogProtocol(Protocol):
    """Protocol for human-facing rule documentation."""

    def get_short_description(self, rule_id: str, default: str = "") -> str: ...
    def get_manual_instructions(self, rule_id: str) -> str: ...
