"""Shared helpers for sbxlite."""

from .helpers import UtilityMixin

__all__ = ["UtilityMixin"]
