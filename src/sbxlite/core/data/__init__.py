"""
Data handling module for sbxlite.

This module contains all client info functionality including:
- Safe parsing of untrusted client info files
- Loading and saving under the installation's file policy
"""

from .parser import SafeKeyValueLoader

__all__ = ["SafeKeyValueLoader"]
