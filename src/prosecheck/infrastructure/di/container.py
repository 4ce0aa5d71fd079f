from typing import Any, Optional

from prosecheck.infrastructure.config_file_loader import ConfigFileLoader
from prosecheck.infrastructure.gateways.filesystem_gateway import FileSystemGateway
from prosecheck.infrastructure.registry import CapabilityRegistry
from prosecheck.infrastructure.services.rule_catalog import RuleCatalog
from prosecheck.infrastructure.telemetry import LoggingTelemetry


class ProsecheckContainer:
    """Dependency Injection Container for prosecheck."""

    _instance: Optional["ProsecheckContainer"] = None

    def __init__(self) -> None:
        self._singletons: dict[str, Any] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        """Register default implementations for protocols."""
        self.register_singleton("TelemetryPort", LoggingTelemetry())
        self.register_singleton("FileSystemGateway", FileSystemGateway())
        self.register_singleton("ConfigFileLoader", ConfigFileLoader())
        self.register_singleton("CapabilityRegistry", CapabilityRegistry.default())
        self.register_singleton("RuleCatalog", RuleCatalog())

    def register_singleton(self, key: str, instance: Any) -> None:
        """Register a singleton instance."""
        self._singletons[key] = instance

    def get(self, key: str) -> Any:
        """Retrieve a dependency by key."""
        if key in self._singletons:
            return self._singletons[key]
        raise ValueError(f"Dependency '{key}' not registered.")

    def get_telemetry_port(self) -> LoggingTelemetry:
        return self.get("TelemetryPort")

    def get_filesystem_gateway(self) -> FileSystemGateway:
        return self.get("FileSystemGateway")

    def get_config_file_loader(self) -> ConfigFileLoader:
        return self.get("ConfigFileLoader")

    def get_registry(self) -> CapabilityRegistry:
        return self.get("CapabilityRegistry")

    def get_rule_catalog(self) -> RuleCatalog:
        return self.get("RuleCatalog")

    @classmethod
    def get_instance(cls) -> "ProsecheckContainer":
        """Get or create global container instance."""
        if cls._instance is None:
            cls._instance = ProsecheckContainer()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance (primarily for testing)."""
        cls._instance = None
