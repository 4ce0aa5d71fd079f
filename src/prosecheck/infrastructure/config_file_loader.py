"""Load [tool.prosecheck] from pyproject.toml or an explicit config file. Infrastructure I/O only."""

import json
import logging
import sys
from pathlib import Path
from typing import Optional

import yaml

from prosecheck.domain.constants import CONFIG_SECTION
from prosecheck.domain.errors import ConfigurationError
from prosecheck.domain.protocols import ConfigSourceProtocol

if sys.version_info >= (3, 11):
    import tomllib as toml_lib
else:
    import tomli as toml_lib

logger = logging.getLogger(__name__)


class ConfigFileLoader(ConfigSourceProtocol):
    """
    Loads config from pyproject.toml or from a standalone JSON/TOML/YAML file.
    """

    @staticmethod
    def load_config_from_fs(start: Optional[Path] = None) -> dict[str, object]:
        """Walk up from ``start`` (default: cwd) to the first pyproject.toml with a [tool.prosecheck] table."""
        current_path = (start or Path.cwd()).resolve()
        while True:
            config_file = current_path / "pyproject.toml"
            if config_file.is_file():
                try:
                    with config_file.open("rb") as f:
                        data = toml_lib.load(f)
                except toml_lib.TOMLDecodeError as exc:
                    raise ConfigurationError(f"{config_file}: invalid TOML: {exc}") from exc
                except OSError:
                    data = {}
                tool_section = data.get("tool", {}) or {}
                config_dict = tool_section.get(CONFIG_SECTION)
                if config_dict is not None:
                    logger.debug("Using configuration from %s", config_file)
                    return ConfigFileLoader._require_table(config_dict, config_file)
            if current_path.parent == current_path:
                return {}
            current_path = current_path.parent

    @staticmethod
    def load_file(path: str) -> dict[str, object]:
        """
        Load an explicit config file. A pyproject.toml (or any TOML file with a
        [tool.prosecheck] table) yields that table; other files are the table itself.

        Raises:
            ConfigurationError: missing, unreadable or malformed file.
        """
        config_file = Path(path)
        suffix = config_file.suffix.lower()
        try:
            if suffix == ".toml":
                with config_file.open("rb") as f:
                    data = toml_lib.load(f)
                tool_section = data.get("tool", {}) or {}
                if CONFIG_SECTION in tool_section:
                    data = tool_section[CONFIG_SECTION]
            elif suffix == ".json":
                data = json.loads(config_file.read_text(encoding="utf-8"))
            elif suffix in (".yaml", ".yml"):
                data = yaml.safe_load(config_file.read_text(encoding="utf-8")) or {}
            else:
                raise ConfigurationError(
                    f"{config_file}: unsupported config format '{suffix}' (use .toml, .json, .yaml or .yml)"
                )
        except OSError as exc:
            raise ConfigurationError(f"{config_file}: cannot read configuration: {exc}") from exc
        except (toml_lib.TOMLDecodeError, json.JSONDecodeError, yaml.YAMLError) as exc:
            raise ConfigurationError(f"{config_file}: invalid configuration: {exc}") from exc
        logger.debug("Using configuration from %s", config_file)
        return ConfigFileLoader._require_table(data, config_file)

    @staticmethod
    def _require_table(data: object, source: Path) -> dict[str, object]:
        if not isinstance(data, dict):
            raise ConfigurationError(f"{source}: configuration must be a table/mapping")
        return data
