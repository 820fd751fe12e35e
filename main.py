#!/usr/bin/env python3
"""
Insight Recon - Main Entry Point
Reconcile two spreadsheet exports and explain the differences.
"""

import sys

from insight_recon.cli import main


if __name__ == "__main__":
    sys.exit(main())
