"""Unit tests for RuleCatalog."""

from pathlib import Path

import yaml

from prosecheck.infrastructure.registry import CapabilityRegistry
from prosecheck.infrastructure.services import rule_catalog
from prosecheck.infrastructure.services.rule_catalog import RuleCatalog

PACKAGED_CATALOG = Path(rule_catalog.__file__).resolve().parents[2] / "resources" / "rule_registry.yaml"


def test_every_builtin_rule_is_documented() -> None:
    entries = yaml.safe_load(PACKAGED_CATALOG.read_text(encoding="utf-8"))
    catalog = RuleCatalog()
    for rule_id, unit in CapabilityRegistry.default().rules():
        entry = entries[rule_id]
        assert entry["default_severity"] == unit.default_severity.value
        assert entry["fixable"] == bool(getattr(unit, "fixable", False))
        assert catalog.get_short_description(rule_id)
        assert catalog.get_manual_instructions(rule_id)


def test_lookups() -> None:
    catalog = RuleCatalog()
    assert catalog.get_short_description("no-emoji") == "Disallow emoji characters in prose."
    assert catalog.get_short_description("unknown", "fallback") == "fallback"
    assert catalog.get_manual_instructions("no-trailing-spaces") == "Delete the whitespace before the line break."
    assert catalog.get_manual_instructions("unknown") == ""


def test_custom_and_missing_files(tmp_path: Path) -> None:
    path = tmp_path / "catalog.yaml"
    path.write_text("my-rule:\n  short_description: Mine.\n  manual_instructions: Fix it.\n", encoding="utf-8")
    catalog = RuleCatalog(str(path))
    assert catalog.get_short_description("my-rule") == "Mine."
    assert catalog.get_manual_instructions("my-rule") == "Fix it."

    missing = RuleCatalog(str(tmp_path / "nope.yaml"))
    assert missing.get_short_description("my-rule", "default") == "default"
