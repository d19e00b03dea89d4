#!/usr/bin/env python3
"""
Load a YAML catalogue from a checkout (same as the `laptop-import` command).

Usage:
  python tools/import_catalog.py config/catalog.example.yaml
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from laptop_selector.cli import import_main


if __name__ == "__main__":
    sys.exit(import_main())
