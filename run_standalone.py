#!/usr/bin/env python3
"""
Standalone launcher for GridSheet
Run this to try the spreadsheet from a source checkout

Usage:
    python run_standalone.py
"""

import sys
from pathlib import Path

# Add the client directory to path
client_dir = Path(__file__).parent / "client"
sys.path.insert(0, str(client_dir))

print("=" * 80)
print("GridSheet - Standalone Mode")
print("=" * 80)
print()

try:
    print("Importing GridSheetApp...")
    from gridsheet.app import main

    print("✓ GridSheetApp imported")
except ImportError as e:
    print(f"✗ Failed to import GridSheetApp: {e}")
    print("  Install: pip install PySide6")
    sys.exit(1)

print("Starting event loop...")
sys.exit(main())
