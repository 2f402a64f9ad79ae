"""Configuration data model for opentui-assets.

Defines the typed configuration that represents .opentui.yml structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from opentui_assets.bootstrap.download import DEFAULT_RELEASE_TAG, DEFAULT_RELEASE_URL
from opentui_assets.bootstrap.paths import get_assets_home


@dataclass
class AssetsConfig:
    """Where assets live and where they are fetched from."""

    home: Path = field(default_factory=get_assets_home)
    release_url: str = DEFAULT_RELEASE_URL
    release_tag: str = DEFAULT_RELEASE_TAG
    include_header: bool = True
    timeout: Optional[float] = None  # None = block until the server responds

    # Where each layer came from, e.g. ["project:/repo/.opentui.yml", "cli"]
    _config_sources: List[str] = field(default_factory=list, repr=False)

    @property
    def sources(self) -> List[str]:
        return list(self._config_sources)
