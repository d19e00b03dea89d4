#!/usr/bin/env python3
"""
Print the laptop table straight from a checkout (same as the `laptop-table` command).

Usage:
  python tools/laptop_table.py [--cpu 100] [--gpu 0] [--limit 10]
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from laptop_selector.cli import table_main


if __name__ == "__main__":
    sys.exit(table_main())
