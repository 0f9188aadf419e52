"""
skillgraph.config - Configuration loading and defaults

Configuration is read from ``.skillgraph.toml`` (discovered by walking up
from the working directory), deep-merged over DEFAULT_CONFIG, with
``.skillgraph.local.toml`` merged on top and ``SKILLGRAPH_<SECTION>_<KEY>``
environment variables applied last.
"""

from __future__ import annotations

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from skillgraph.config.defaults import (
    CONFIG_FILENAME,
    DEFAULT_CONFIG,
    ENV_PREFIX,
    LOCAL_CONFIG_FILENAME,
)

logger = logging.getLogger(__name__)


class ConfigLoader:
    """Read-only view over a merged configuration dict.

    Attributes:
        base_dir: Directory relative paths are resolved against (the
            directory holding the config file, or the working directory).
        source: The config file the values came from, if any.
    """

    def __init__(
        self,
        data: dict[str, Any],
        base_dir: Path | None = None,
        source: Path | None = None,
    ) -> None:
        self._data = data
        self.base_dir = base_dir or Path.cwd()
        self.source = source

    @classmethod
    def from_dict(cls, data: dict[str, Any], base_dir: Path | None = None) -> ConfigLoader:
        return cls(copy.deepcopy(data), base_dir=base_dir)

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``"leverage.damping"``."""
        current: Any = self._data
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def get_path(self, key: str, default: str | None = None) -> Path | None:
        """Look up a path value, expanding ``~`` and resolving relative paths."""
        value = self.get(key, default)
        if value in (None, ""):
            return None
        path = Path(str(value)).expanduser()
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def section(self, name: str) -> dict[str, Any]:
        value = self._data.get(name, {})
        return dict(value) if isinstance(value, dict) else {}

    def get_raw(self) -> dict[str, Any]:
        """Return a deep copy of the underlying dict."""
        return copy.deepcopy(self._data)

    def __contains__(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING


_MISSING = object()


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge ``override`` into a copy of ``base``.

    Nested tables merge key by key; any other value in ``override``
    replaces the base value.
    """
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML text into plain Python containers.

    Raises:
        ValueError: If the text is not valid TOML.
    """
    try:
        return tomlkit.parse(content).unwrap()
    except TOMLKitError as e:
        raise ValueError(f"Invalid TOML: {e}") from e


def find_git_root(start: Path | None = None) -> Path | None:
    """Find the nearest directory containing ``.git`` (directory or worktree file)."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def find_config_file(start: Path | None = None) -> Path | None:
    """Walk up from ``start`` looking for ``.skillgraph.toml``.

    The search stops at the git root (if any) so a config from an
    unrelated parent project is never picked up.
    """
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        config_path = candidate / CONFIG_FILENAME
        if config_path.is_file():
            return config_path
        if (candidate / ".git").exists():
            break
    return None


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment value into a typed Python value.

    Booleans (``true``/``false``), JSON lists/objects and numbers are
    converted; anything else, including malformed JSON, is returned as
    the original string.
    """
    lowered = value.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if value.strip().startswith(("[", "{")):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply ``SKILLGRAPH_<SECTION>_<KEY>`` overrides in place.

    The first segment after the prefix names the section; the rest,
    lower-cased, is the key (``SKILLGRAPH_LEVERAGE_MAX_ITERATIONS`` sets
    ``leverage.max_iterations``).
    """
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        parts = name[len(ENV_PREFIX) :].lower().split("_", 1)
        if len(parts) != 2 or not all(parts):
            continue
        section, key = parts
        table = config.setdefault(section, {})
        if not isinstance(table, dict):
            logger.warning("Ignoring %s: [%s] is not a table", name, section)
            continue
        table[key] = _try_parse_env_value(raw)
        logger.debug("Config override from %s", name)
    return config


def load_config(config_path: Path, apply_env: bool = True) -> ConfigLoader:
    """Load a config file merged over the defaults.

    A sibling ``.skillgraph.local.toml`` is deep-merged on top when present.

    Raises:
        FileNotFoundError: If ``config_path`` does not exist.
        ValueError: If either file is not valid TOML.
    """
    config_path = Path(config_path)
    data = merge_configs(DEFAULT_CONFIG, parse_toml(config_path.read_text(encoding="utf-8")))

    local_path = config_path.parent / LOCAL_CONFIG_FILENAME
    if local_path.is_file():
        data = merge_configs(data, parse_toml(local_path.read_text(encoding="utf-8")))
        logger.debug("Merged local config %s", local_path)

    if apply_env:
        data = _apply_env_overrides(data)
    return ConfigLoader(data, base_dir=config_path.parent.resolve(), source=config_path)


def get_config(config_path: Path | None = None, start_dir: Path | None = None) -> ConfigLoader:
    """Resolve the effective configuration.

    Uses ``config_path`` when given, otherwise discovers
    ``.skillgraph.toml`` from ``start_dir``. Falls back to the defaults
    (plus environment overrides) when no file is found.
    """
    if config_path is None:
        config_path = find_config_file(start_dir)
    if config_path is not None:
        return load_config(config_path)
    data = _apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG))
    return ConfigLoader(data, base_dir=(start_dir or Path.cwd()).resolve())


__all__ = [
    "ConfigLoader",
    "DEFAULT_CONFIG",
    "get_config",
    "load_config",
    "find_config_file",
    "find_git_root",
    "merge_configs",
    "parse_toml",
]
