"""
Entry point for running pinbridge as a module.

Usage: python -m pinbridge [command] [options]
"""

from pinbridge.cli.parser import main

if __name__ == "__main__":
    main()
