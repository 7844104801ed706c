#!/usr/bin/env python3
"""Age of Focus entry point.

Run with:
    python main.py
    python -m ageoffocus
"""

from ageoffocus.__main__ import main


if __name__ == "__main__":
    main()
