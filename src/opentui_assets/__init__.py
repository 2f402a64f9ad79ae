"""opentui-assets - fetch the OpenTUI native library on first use.

Bindings call ensure_assets() (or get_library_path()) before loading the
library. The first call in a process downloads whatever is missing; every
later call replays that outcome. A failure raises ProvisioningError, which
a binding should let propagate so startup aborts.
"""

from __future__ import annotations

__version__ = "0.1.0"

import threading
from pathlib import Path
from typing import Optional

from opentui_assets.bootstrap.provisioner import (
    AssetProvisioner,
    ProvisioningError,
    ProvisioningResult,
)
from opentui_assets.config.loader import load_config
from opentui_assets.config.models import AssetsConfig

_default_provisioner: Optional[AssetProvisioner] = None
_default_lock = threading.Lock()


def configure(config: AssetsConfig) -> AssetProvisioner:
    """Replace the process-wide provisioner, e.g. to set the assets home.

    Must be called before the first ensure_assets() to take effect for it.
    """
    global _default_provisioner
    with _default_lock:
        _default_provisioner = AssetProvisioner.from_config(config)
        return _default_provisioner


def get_provisioner() -> AssetProvisioner:
    """Return the process-wide provisioner, creating it from config on first use."""
    global _default_provisioner
    with _default_lock:
        if _default_provisioner is None:
            _default_provisioner = AssetProvisioner.from_config(load_config())
        return _default_provisioner


def ensure_assets() -> ProvisioningResult:
    """Make sure the OpenTUI assets are on disk, at most once per process.

    Raises:
        ProvisioningError: If the first attempt failed.
    """
    return get_provisioner().ensure()


def get_library_path() -> Path:
    """Path of the native library for this platform, provisioning it if needed."""
    return ensure_assets().library_path


def get_header_path() -> Optional[Path]:
    """Path of opentui.h, or None when header provisioning is disabled."""
    return ensure_assets().header_path


__all__ = [
    "__version__",
    "AssetsConfig",
    "AssetProvisioner",
    "ProvisioningError",
    "ProvisioningResult",
    "configure",
    "get_provisioner",
    "ensure_assets",
    "get_library_path",
    "get_header_path",
]
