"""Capability registry: string ids to rule units, format plugins and presets."""

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any, Optional

from prosecheck.domain.descriptor import AnyRule
from prosecheck.domain.errors import ConfigurationError
from prosecheck.domain.plugins import FormatPlugin
from prosecheck.domain.protocols import CapabilityRegistryProtocol
from prosecheck.domain.rules.no_duplicate_documents import NoDuplicateDocumentsRule
from prosecheck.domain.rules.no_emoji import NoEmojiRule
from prosecheck.domain.rules.no_todo import NoTodoRule
from prosecheck.domain.rules.no_trailing_spaces import NoTrailingSpacesRule
from prosecheck.domain.rules.sentence_length import SentenceLengthRule
from prosecheck.infrastructure.plugins.markdown import MarkdownPlugin
from prosecheck.infrastructure.plugins.plain_text import PlainTextPlugin

logger = logging.getLogger(__name__)

PluginFactory = Callable[..., FormatPlugin]

RECOMMENDED_RULES: Mapping[str, Any] = MappingProxyType(
    {
        "no-emoji": True,
        "no-trailing-spaces": True,
        "sentence-length": True,
        "no-duplicate-documents": True,
    }
)


class CapabilityRegistry(CapabilityRegistryProtocol):
    """
    Rule units are registered as shared instances (they are stateless); plugins
    as factories, so each session may construct them with its own options.
    Registration order is the listing order of ``rule_ids``/``plugin_ids``.
    """

    def __init__(self) -> None:
        self._rules: dict[str, AnyRule] = {}
        self._plugins: dict[str, PluginFactory] = {}
        self._presets: dict[str, Mapping[str, Any]] = {}

    def register_rule(self, unit: AnyRule, rule_id: Optional[str] = None) -> None:
        """Register a unit under ``rule_id`` (defaults to the unit's own id)."""
        key = rule_id or unit.rule_id
        if key in self._rules:
            raise ValueError(f"Rule '{key}' already registered.")
        self._rules[key] = unit

    def register_plugin(self, plugin_id: str, factory: PluginFactory) -> None:
        if plugin_id in self._plugins:
            raise ValueError(f"Plugin '{plugin_id}' already registered.")
        self._plugins[plugin_id] = factory

    def register_preset(self, name: str, rules: Mapping[str, Any]) -> None:
        if name in self._presets:
            raise ValueError(f"Preset '{name}' already registered.")
        self._presets[name] = MappingProxyType(dict(rules))

    def rule(self, rule_id: str) -> AnyRule:
        if rule_id not in self._rules:
            raise ConfigurationError(
                f"Unknown rule '{rule_id}' (known rules: {', '.join(self._rules) or 'none'})"
            )
        return self._rules[rule_id]

    def create_plugin(self, plugin_id: str, options: Optional[Mapping[str, Any]] = None) -> FormatPlugin:
        if plugin_id not in self._plugins:
            raise ConfigurationError(
                f"Unknown plugin '{plugin_id}' (known plugins: {', '.join(self._plugins) or 'none'})"
            )
        try:
            return self._plugins[plugin_id](**dict(options or {}))
        except TypeError as exc:
            raise ConfigurationError(f"Invalid options for plugin '{plugin_id}': {exc}") from exc

    def preset(self, name: str) -> Mapping[str, Any]:
        if name not in self._presets:
            raise ConfigurationError(
                f"Unknown preset '{name}' (known presets: {', '.join(self._presets) or 'none'})"
            )
        return self._presets[name]

    @property
    def rule_ids(self) -> tuple[str, ...]:
        return tuple(self._rules)

    @property
    def plugin_ids(self) -> tuple[str, ...]:
        return tuple(self._plugins)

    @property
    def preset_names(self) -> tuple[str, ...]:
        return tuple(self._presets)

    def rules(self) -> list[tuple[str, AnyRule]]:
        return list(self._rules.items())

    @classmethod
    def default(cls) -> "CapabilityRegistry":
        """A registry holding the built-in rules, plugins and presets."""
        registry = cls()
        for unit in (
            NoEmojiRule(),
            NoTrailingSpacesRule(),
            SentenceLengthRule(),
            NoTodoRule(),
            NoDuplicateDocumentsRule(),
        ):
            registry.register_rule(unit)
        registry.register_plugin(MarkdownPlugin.plugin_id, MarkdownPlugin)
        registry.register_plugin(PlainTextPlugin.plugin_id, PlainTextPlugin)
        registry.register_preset("recommended", RECOMMENDED_RULES)
        registry.register_preset("all", {rule_id: True for rule_id in registry.rule_ids})
        logger.debug(
            "Default registry: rules=%s plugins=%s", list(registry.rule_ids), list(registry.plugin_ids)
        )
        return registry
