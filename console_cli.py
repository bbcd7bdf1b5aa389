#!/usr/bin/env python3
"""Standalone CLI runner for console tools.

Usage:
    python console_cli.py --help
    python console_cli.py export-seeds
    python console_cli.py convert-translations category
    python console_cli.py add-column-migration users age integer
"""

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from console_tools.cli import cli

if __name__ == "__main__":
    cli()
