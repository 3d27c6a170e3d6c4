"""
Entry point for running the pinbridge CLI as a module.

Usage: python -m pinbridge.cli [command] [options]
"""

from .parser import main

if __name__ == "__main__":
    main()
