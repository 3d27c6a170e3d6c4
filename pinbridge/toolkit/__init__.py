"""
Toolkit release description, layout and discovery.
"""

from .spec import ToolkitSpec
from .layout import ToolkitLayout
from .discovery import ExtractedPackage, find_package_dir

__all__ = [
    "ToolkitSpec",
    "ToolkitLayout",
    "ExtractedPackage",
    "find_package_dir",
]
