"""Unit tests for CapabilityRegistry."""

import pytest

from prosecheck.domain.errors import ConfigurationError
from prosecheck.domain.rules.no_emoji import NoEmojiRule
from prosecheck.infrastructure.plugins.markdown import MarkdownPlugin
from prosecheck.infrastructure.registry import RECOMMENDED_RULES, CapabilityRegistry


class TestCapabilityRegistry:
    def setup_method(self) -> None:
        self.registry = CapabilityRegistry.default()

    def test_default_contents(self) -> None:
        assert self.registry.rule_ids == (
            "no-emoji",
            "no-trailing-spaces",
            "sentence-length",
            "no-todo",
            "no-duplicate-documents",
        )
        assert self.registry.plugin_ids == ("markdown", "text")
        assert self.registry.preset_names == ("recommended", "all")
        assert dict(self.registry.preset("recommended")) == dict(RECOMMENDED_RULES)
        assert set(self.registry.preset("all")) == set(self.registry.rule_ids)

    def test_rule_lookup_returns_shared_instance(self) -> None:
        assert self.registry.rule("no-emoji") is self.registry.rule("no-emoji")
        assert [rule_id for rule_id, _ in self.registry.rules()] == list(self.registry.rule_ids)

    def test_plugins_are_built_per_call(self) -> None:
        first = self.registry.create_plugin("markdown")
        second = self.registry.create_plugin("markdown", {"strict": False})
        assert first is not second
        assert first.strict is True
        assert second.strict is False

    def test_unknown_ids(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown rule 'nope'"):
            self.registry.rule("nope")
        with pytest.raises(ConfigurationError, match="Unknown plugin 'rst'"):
            self.registry.create_plugin("rst")
        with pytest.raises(ConfigurationError, match="Unknown preset 'strict'"):
            self.registry.preset("strict")

    def test_bad_plugin_options(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid options for plugin 'text'"):
            self.registry.create_plugin("text", {"strict": True})

    def test_duplicate_registration(self) -> None:
        with pytest.raises(ValueError):
            self.registry.register_rule(NoEmojiRule())
        with pytest.raises(ValueError):
            self.registry.register_plugin("markdown", MarkdownPlugin)
        with pytest.raises(ValueError):
            self.registry.register_preset("all", {})

    def test_register_under_alias(self) -> None:
        registry = CapabilityRegistry()
        registry.register_rule(NoEmojiRule(), rule_id="emoji-free")
        assert registry.rule_ids == ("emoji-free",)
        assert isinstance(registry.rule("emoji-free"), NoEmojiRule)
