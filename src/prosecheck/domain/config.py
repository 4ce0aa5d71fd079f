"""Turns a [tool.prosecheck] mapping into a Descriptor."""

import logging
from collections.abc import Mapping
from typing import Any, Optional

from prosecheck.domain.constants import DEFAULT_FORMATTER, DEFAULT_MAX_FIX_ITERATIONS, DEFAULT_PRESET
from prosecheck.domain.descriptor import Descriptor, PluginBinding, RuleDescriptor
from prosecheck.domain.entities import Severity
from prosecheck.domain.errors import ConfigurationError
from prosecheck.domain.protocols import CapabilityRegistryProtocol

logger = logging.getLogger(__name__)


class ConfigurationLoader:
    """
    Reads configuration values and resolves rule/plugin ids with a registry.

    Rule values: ``true`` enables with no options, ``false`` disables, a
    severity name ("error") enables with that severity, a table enables with
    options. A ``severity`` key inside a table is the RuleDescriptor override;
    the rest of the table reaches the rule verbatim. Presets are expanded
    first (``recommended`` when no ``presets`` key is given) and ``rules``
    entries override them.
    """

    def __init__(
        self,
        config_dict: Optional[Mapping[str, Any]] = None,
        registry: Optional[CapabilityRegistryProtocol] = None,
    ) -> None:
        self.config_dict: dict[str, Any] = dict(config_dict or {})
        self.registry = registry

    # -- scalar settings -----------------------------------------------------

    @property
    def max_fix_iterations(self) -> int:
        return self._positive_int("max_fix_iterations", DEFAULT_MAX_FIX_ITERATIONS)

    @property
    def workers(self) -> int:
        return self._positive_int("workers", 1)

    @property
    def timeout(self) -> Optional[float]:
        value = self.config_dict.get("timeout")
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            raise ConfigurationError(f"'timeout' must be a positive number of seconds, got {value!r}")
        return float(value)

    @property
    def formatter(self) -> str:
        value = self.config_dict.get("formatter", DEFAULT_FORMATTER)
        if not isinstance(value, str) or not value:
            raise ConfigurationError(f"'formatter' must be a formatter name, got {value!r}")
        return value

    def _positive_int(self, key: str, default: int) -> int:
        value = self.config_dict.get(key, default)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ConfigurationError(f"'{key}' must be a positive integer, got {value!r}")
        return value

    # -- rules ---------------------------------------------------------------

    def rule_settings(self) -> dict[str, Any]:
        """Preset expansion followed by the explicit rules table, in declaration order."""
        presets = self.config_dict.get("presets", {DEFAULT_PRESET: True})
        rules = self.config_dict.get("rules", {})
        if isinstance(presets, list):
            presets = {name: True for name in presets}
        if not isinstance(presets, Mapping):
            raise ConfigurationError("'presets' must be a table or a list of preset names")
        if not isinstance(rules, Mapping):
            raise ConfigurationError("'rules' must be a table")

        merged: dict[str, Any] = {}
        for name, enabled in presets.items():
            if enabled is True:
                merged.update(self._registry().preset(str(name)))
            elif enabled is not False:
                raise ConfigurationError(f"Preset '{name}' must be true or false")
        merged.update(rules)
        return merged

    def rule_descriptors(self) -> list[RuleDescriptor]:
        registry = self._registry()
        descriptors: list[RuleDescriptor] = []
        for rule_id, value in self.rule_settings().items():
            if value is False:
                continue
            options, severity = self._split_rule_value(rule_id, value)
            descriptors.append(
                RuleDescriptor(
                    rule_id=rule_id,
                    unit=registry.rule(rule_id),
                    options=options,
                    severity=severity,
                )
            )
        return descriptors

    @staticmethod
    def _split_rule_value(rule_id: str, value: Any) -> tuple[Any, Optional[Severity]]:
        if value is True or value is None:
            return None, None
        try:
            if isinstance(value, str):
                return None, Severity.parse(value)
            if isinstance(value, Mapping):
                options = dict(value)
                raw_severity = options.pop("severity", None)
                severity = Severity.parse(raw_severity) if raw_severity is not None else None
                return (options or None), severity
        except ValueError as exc:
            raise ConfigurationError(f"Rule '{rule_id}': {exc}") from exc
        raise ConfigurationError(
            f"Rule '{rule_id}' must be true, false, a severity name or a table, got {value!r}"
        )

    # -- plugins -------------------------------------------------------------

    def plugin_bindings(self) -> list[PluginBinding]:
        """Configured plugins, or every registered plugin when none are listed."""
        registry = self._registry()
        configured = self.config_dict.get("plugins")
        if configured is None:
            entries: dict[str, Any] = {plugin_id: True for plugin_id in registry.plugin_ids}
        elif isinstance(configured, list):
            entries = {str(plugin_id): True for plugin_id in configured}
        elif isinstance(configured, Mapping):
            entries = dict(configured)
        else:
            raise ConfigurationError("'plugins' must be a list of plugin ids or a table")

        bindings: list[PluginBinding] = []
        for plugin_id, value in entries.items():
            if value is False:
                continue
            if value is True:
                options: Optional[Mapping[str, Any]] = None
            elif isinstance(value, Mapping):
                options = value
            else:
                raise ConfigurationError(f"Plugin '{plugin_id}' must be true, false or a table")
            bindings.append(PluginBinding(plugin_id, registry.create_plugin(plugin_id, options)))
        return bindings

    # -- descriptor ----------------------------------------------------------

    def build_descriptor(self) -> Descriptor:
        """
        Raises:
            ConfigurationError: malformed values or unknown ids.
            DescriptorValidationError: the resolved composition is invalid.
        """
        rules = self.rule_descriptors()
        plugins = self.plugin_bindings()
        logger.debug("Resolved %d rule(s) and %d plugin(s) from configuration", len(rules), len(plugins))
        return Descriptor.build(rules, plugins, config=self.config_dict)

    def _registry(self) -> CapabilityRegistryProtocol:
        if self.registry is None:
            raise ConfigurationError("No capability registry configured")
        return self.registry
