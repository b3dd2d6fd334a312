#!/usr/bin/env python3
"""
Liquid ASCII — quick launcher.

Usage:
    python run_liquidascii.py [options]

Run ``python run_liquidascii.py --help`` for full options.
"""

from liquidascii.app import main

if __name__ == "__main__":
    main()
