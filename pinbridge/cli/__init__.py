"""
Command-line interface for pinbridge.
"""

from .parser import CLI, main

__all__ = ["CLI", "main"]
