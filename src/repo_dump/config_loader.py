"""
Configuration file loader for repo-dump.

Supports loading configuration from the dump root:
- repo-dump.toml / .repo-dump.toml
- repo-dump.yml / .repo-dump.yml / repo-dump.yaml / .repo-dump.yaml

CLI flags override config file values.
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Optional runtime modules (loaded via importlib); typed as Any to avoid stub issues.
tomllib: Any | None
yaml: Any | None

try:
    import tomllib as _tomllib  # Python 3.11+
except ImportError:
    try:
        _tomllib = importlib.import_module("tomli")
    except ImportError:
        _tomllib = None
tomllib = _tomllib

try:
    yaml = importlib.import_module("yaml")
except ImportError:
    yaml = None


# Config file search order (first found wins)
CONFIG_FILE_NAMES = [
    "repo-dump.toml",
    ".repo-dump.toml",
    "repo-dump.yml",
    ".repo-dump.yml",
    "repo-dump.yaml",
    ".repo-dump.yaml",
]

# Name of the optional nested section
SECTION_NAME = "repo-dump"


@dataclass
class ProjectConfig:
    """
    Project-level configuration loaded from a config file.

    All fields are optional - CLI flags will override any values set here.
    """

    description: str | None = None
    output: Path | None = None
    exclude: list[str] = field(default_factory=list)

    # Source file path (for debugging)
    _config_file: Path | None = field(default=None, repr=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary with sorted keys."""
        result: dict[str, Any] = {}
        if self.description is not None:
            result["description"] = self.description
        if self.output is not None:
            result["output"] = str(self.output)
        if self.exclude:
            result["exclude"] = list(self.exclude)
        if self._config_file is not None:
            result["_loaded_from"] = str(self._config_file)
        return dict(sorted(result.items()))


def find_config_file(repo_root: Path) -> Path | None:
    """
    Find a configuration file in the dump root.

    Args:
        repo_root: Root directory of the dump

    Returns:
        Path to the config file, or None if not found
    """
    for name in CONFIG_FILE_NAMES:
        config_path = repo_root / name
        if config_path.exists() and config_path.is_file():
            return config_path
    return None


def _unwrap_section(data: dict[str, Any]) -> dict[str, Any]:
    # Support both flat and nested [repo-dump] section
    section = data.get(SECTION_NAME)
    if isinstance(section, dict):
        return dict(section)
    return data


def _parse_toml(path: Path) -> dict[str, Any]:
    """Parse a TOML config file into a dict.

    Raises:
        ImportError: If TOML parsing support is unavailable.
    """
    if tomllib is None:
        raise ImportError(
            "TOML support requires 'tomli' package (Python < 3.11) or Python 3.11+. "
            "Install with: pip install tomli"
        )

    with open(path, "rb") as f:
        data: dict[str, Any] = tomllib.load(f)

    return _unwrap_section(data)


def _parse_yaml(path: Path) -> dict[str, Any]:
    """Parse a YAML config file into a dict.

    Raises:
        ImportError: If PyYAML is not installed.
    """
    if yaml is None:
        raise ImportError(
            "YAML support requires 'pyyaml' package. Install with: pip install pyyaml"
        )

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        return {}

    return _unwrap_section(dict(raw_data))


def normalize_patterns(patterns: Any) -> list[str]:
    """Normalize pattern input to a list, preserving order and dropping blanks.

    Args:
        patterns: Patterns from config/CLI (comma-separated string, list, or None).

    Returns:
        A list of stripped patterns (empty if unset/invalid).
    """
    if patterns is None:
        return []

    if isinstance(patterns, str):
        patterns = patterns.split(",")

    if not isinstance(patterns, (list, tuple)):
        return []

    result = []
    for pattern in patterns:
        pattern = str(pattern).strip()
        if pattern and pattern not in result:
            result.append(pattern)
    return result


def load_config(repo_root: Path, config_path: Path | None = None) -> ProjectConfig:
    """
    Load configuration from a config file.

    Args:
        repo_root: Root directory of the dump
        config_path: Explicit path to config file (optional)

    Returns:
        ProjectConfig with loaded values (unset values remain None).
    """
    if config_path is None:
        config_path = find_config_file(repo_root)

    if config_path is None or not config_path.exists():
        return ProjectConfig()

    suffix = config_path.suffix.lower()
    try:
        if suffix == ".toml":
            data = _parse_toml(config_path)
        elif suffix in (".yml", ".yaml"):
            data = _parse_yaml(config_path)
        else:
            return ProjectConfig()
    except Exception:
        # Silently ignore parse errors - CLI will work without config
        return ProjectConfig()

    config = ProjectConfig(_config_file=config_path)

    if data.get("description") is not None:
        config.description = str(data["description"])
    if data.get("output") is not None:
        config.output = Path(data["output"])
    config.exclude = normalize_patterns(data.get("exclude") or data.get("ignore"))

    return config


def merge_cli_with_config(
    config: ProjectConfig,
    *,
    description: str | None = None,
    output: Path | None = None,
    exclude: list[str] | None = None,
) -> dict[str, Any]:
    """Merge CLI arguments with config file values (CLI wins).

    Exclude patterns are additive: config patterns come first, then CLI patterns.

    Args:
        config: Config loaded from file (may have unset values).
        description: Description from CLI (optional).
        output: Output file from CLI (optional).
        exclude: Extra ignore patterns from CLI (optional).

    Returns:
        Dictionary of merged configuration values used by the dump command.
    """
    result: dict[str, Any] = {}

    if description is not None:
        result["description"] = description
    else:
        result["description"] = config.description

    if output is not None:
        result["output"] = output
    else:
        result["output"] = config.output  # None means stdout

    result["exclude"] = normalize_patterns(list(config.exclude) + list(exclude or []))

    return result
