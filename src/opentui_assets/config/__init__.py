"""Configuration loading for opentui-assets."""

from opentui_assets.config.models import AssetsConfig
from opentui_assets.config.loader import ConfigError, load_config

__all__ = ["AssetsConfig", "ConfigError", "load_config"]
