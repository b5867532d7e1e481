#!/usr/bin/env python3
"""Main entry point for LinkTrace."""

from linktrace.__main__ import main


if __name__ == "__main__":
    main()
