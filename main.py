#!/usr/bin/env python3
"""
Minefield - Main entry point.

Usage:
    python main.py [--rows N] [--cols N] [--prob P] [--preset NAME] [--seed S]
"""
import sys

from src.minefield.cli import main


if __name__ == "__main__":
    sys.exit(main())
