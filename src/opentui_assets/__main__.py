"""Allow `python -m opentui_assets`."""

from opentui_assets.cli import main

raise SystemExit(main())
