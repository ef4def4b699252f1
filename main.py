"""
OI Momentum Engine - Main Entry Point

Usage:
    python main.py --input oi.csv                   # JSON report, dev config
    python main.py --input oi.json --format text    # Terminal summary
    python main.py --input oi.csv --env prod        # Production logging
"""

from __future__ import annotations

import sys

from oimomentum.runners.oi_momentum_runner import main

if __name__ == "__main__":
    sys.exit(main())
