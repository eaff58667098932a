#!/usr/bin/env python

"""
Time Tracker Application - Main Entry Point

A terminal time tracker for projects, tasks and time entries.

Usage:
    python main.py --database timetracker.sqlite

Requirements:
    - Python 3.10+
    - See pyproject.toml for dependencies
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from timetracker.cli import main


if __name__ == "__main__":
    sys.exit(main())
