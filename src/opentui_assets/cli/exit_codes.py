"""Exit codes for the opentui-assets CLI.

- 0: Assets present or downloaded
- 1: Provisioning failed (unsupported platform, network, HTTP status, write)
- 3: Invalid usage (bad arguments, bad config)
"""

from __future__ import annotations

EXIT_SUCCESS = 0
EXIT_DOWNLOAD_FAILURE = 1
EXIT_INVALID_USAGE = 3
