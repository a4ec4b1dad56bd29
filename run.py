#!/usr/bin/env python
"""
Launcher script for Bakery Costing.

This script ensures the src/ directory is on the Python path before
running the command-line interface.
"""

import sys
from pathlib import Path

# Add src/ to the Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root / "src"))

from bakery_costing.main import main

if __name__ == "__main__":
    sys.exit(main())
