"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Project-level config (.opentui.yml)
- Global config (<assets home>/config.yml)
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from opentui_assets.bootstrap.paths import get_assets_home
from opentui_assets.config.models import AssetsConfig
from opentui_assets.config.validation import ValidationSeverity, validate_config
from opentui_assets.core.logging import get_logger

LOGGER = get_logger(__name__)

# Config file names
PROJECT_CONFIG_NAMES = [".opentui.yml", ".opentui.yaml", "opentui.yml", "opentui.yaml"]
GLOBAL_CONFIG_NAME = "config.yml"

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def load_config(
    project_root: Optional[Path] = None,
    defaults: Optional[Dict[str, Any]] = None,
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    skip_global_keys: Iterable[str] = (),
) -> AssetsConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path) OR project config (.opentui.yml)
    3. Global config (<assets home>/config.yml)
    4. Caller defaults (defaults)
    5. Built-in defaults

    Args:
        project_root: Directory searched for .opentui.yml (defaults to cwd).
        defaults: Values applied beneath every config file.
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.
        skip_global_keys: Keys dropped from the global config, so that the
            caller defaults for them hold unless a project file or CLI flag
            sets them.

    Returns:
        Merged AssetsConfig instance.

    Raises:
        ConfigError: If a specified config file doesn't exist, has parse
            errors, or holds values of the wrong type.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = dict(defaults) if defaults else {}

    # Layer 1: Global config
    global_path = find_global_config()
    if global_path is not None:
        try:
            global_data = _load_validated(global_path)
            for key in skip_global_keys:
                if global_data.pop(key, None) is not None:
                    LOGGER.debug(f"Ignoring '{key}' from global config {global_path}")
            merged = merge_configs(merged, global_data)
            sources.append(f"global:{global_path}")
            LOGGER.debug(f"Loaded global config from {global_path}")
        except (ConfigError, yaml.YAMLError, OSError) as e:
            LOGGER.warning(f"Failed to load global config: {e}")

    # Layer 2: Project or custom config
    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        config_path: Optional[Path] = cli_config_path
        label = "custom"
    else:
        config_path = find_project_config(project_root if project_root else Path.cwd())
        label = "project"

    if config_path is not None:
        try:
            merged = merge_configs(merged, _load_validated(config_path))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        sources.append(f"{label}:{config_path}")
        LOGGER.debug(f"Loaded {label} config from {config_path}")

    # Layer 3: CLI overrides
    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")
        LOGGER.debug("Applied CLI overrides")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def find_project_config(project_root: Path) -> Optional[Path]:
    """Find config file in project root.

    Args:
        project_root: Directory to search in.

    Returns:
        Path to config file if found, None otherwise.
    """
    for name in PROJECT_CONFIG_NAMES:
        config_path = project_root / name
        if config_path.exists():
            return config_path
    return None


def find_global_config() -> Optional[Path]:
    """Find global config at <assets home>/config.yml.

    Returns:
        Path to global config if it exists, None otherwise.
    """
    config_path = get_assets_home() / GLOBAL_CONFIG_NAME
    if config_path.exists():
        return config_path
    return None


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Args:
        path: Path to YAML file.

    Returns:
        Parsed dictionary.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def _load_validated(path: Path) -> Dict[str, Any]:
    data = load_yaml_file(path)
    errors = [
        issue
        for issue in validate_config(data, source=str(path))
        if issue.severity == ValidationSeverity.ERROR
    ]
    if errors:
        raise ConfigError("; ".join(f"{issue.message} in {issue.source}" for issue in errors))
    return data


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two config dicts, with overlay taking precedence.

    Dicts are merged recursively; every other value is replaced.
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def dict_to_config(data: Dict[str, Any]) -> AssetsConfig:
    """Convert a merged config dictionary to AssetsConfig.

    Unknown keys are ignored; missing keys take their defaults.
    """
    config = AssetsConfig()

    home = data.get("home")
    if home:
        config.home = Path(os.path.expanduser(str(home)))
    if data.get("release_url"):
        config.release_url = str(data["release_url"])
    if data.get("release_tag"):
        config.release_tag = str(data["release_tag"])
    if "include_header" in data:
        config.include_header = bool(data["include_header"])
    if data.get("timeout") is not None:
        config.timeout = float(data["timeout"])

    return config
