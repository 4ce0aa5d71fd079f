"""RuleCatalog: loads the rule registry yaml that documents each built-in rule."""

from pathlib import Path
from typing import cast

import yaml

from prosecheck.domain.protocols import RuleCatalogProtocol
from prosecheck.domain.registry_types import RuleCatalogEntry


class RuleCatalog(RuleCatalogProtocol):
    """Loads rule_registry.yaml and answers lookups by rule id."""

    def __init__(self, registry_path: str | None = None) -> None:
        if registry_path is not None:
            self._path = Path(registry_path)
        else:
            # Default: packaged resource next to this package
            _base = Path(__file__).resolve().parent.parent.parent
            self._path = _base / "resources" / "rule_registry.yaml"
        self._registry: dict[str, RuleCatalogEntry] = {}
        self._load()

    def _load(self) -> None:
        if self._path.exists():
            with open(self._path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                self._registry = (
                    cast(dict[str, RuleCatalogEntry], data) if isinstance(data, dict) else {}
                )
        else:
            self._registry = {}

    def get_short_description(self, rule_id: str, default: str = "") -> str:
        entry = self._registry.get(rule_id) or {}
        return str(entry.get("short_description", default))

    def get_manual_instructions(self, rule_id: str) -> str:
        entry = self._registry.get(rule_id) or {}
        return str(entry.get("manual_instructions", ""))
