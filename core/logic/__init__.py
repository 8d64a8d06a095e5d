"""
Core Business Logic Package.

Contains business logic that operates on pure data models.
Separated from models to maintain clean architecture.

Exports:
    Layout resolution: ROLE_TABLE, RoleSpec, resolve_layout, phase_roots
    Disambiguation: suffixed_name
"""

# Layout resolution
from .layout_resolver import (
    ROLE_TABLE,
    RoleSpec,
    phase_roots,
    resolve_layout
)

# Disambiguation
from .disambiguation import suffixed_name

__all__ = [
    # Layout resolution
    'ROLE_TABLE',
    'RoleSpec',
    'phase_roots',
    'resolve_layout',

    # Disambiguation
    'suffixed_name',
]
