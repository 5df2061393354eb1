#!/usr/bin/env python3
"""
bgsched CLI entry point.

Allows running: python -m bgsched <command>
"""

from bgsched.cli import main

if __name__ == "__main__":
    main()
