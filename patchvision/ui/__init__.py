# patchvision/ui/__init__.py
"""
PatchVision UI Module
Terminal colors for CLI output.
"""

from . import colors
from .colors import colorize, glow

__all__ = ["colors", "colorize", "glow"]
