"""
Business logic services for sbxlite.

This module contains all core business logic including:
- Schema validation of configuration fragments
- Engine version comparison and release lookups
- Client exports
"""

# Mixins are imported by manager.py as needed
from .schema_validator import SchemaValidator
from .versioning import meets_minimum

__all__ = ["SchemaValidator", "meets_minimum"]
