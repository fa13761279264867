#!/usr/bin/env python3
"""Cronos: entry point.

Run with:
    python main.py
    python -m cronos
"""

from cronos.__main__ import main


if __name__ == "__main__":
    main()
