"""
Core Data Models Package.

Contains pure data structures without business logic.
All business logic is in the core.logic package.

Exports:
    LayoutRole, LayoutScope, BuildPhase: Layout enums
    DependencyScope, HostPlatform: Recipe enums
    Version: Dotted version numbers
    Package, Keg: Formula identity and physical install tree
    ResolvedPath, LayoutOverride: Resolved directory overrides
    Artifact: Installed (and possibly renamed) file
    SourceArchive, HeadSource, Livecheck, Dependency: Recipe metadata
    CompilerRestriction, Deprecation, ServiceDescriptor: Recipe metadata
"""

# Enums
from .enums import (
    LayoutRole,
    LayoutScope,
    BuildPhase,
    DependencyScope,
    HostPlatform
)

# Identity
from .version import Version
from .package import Package, Keg

# Layout
from .layout import (
    CONFIGURE_FLAG_ROLES,
    ResolvedPath,
    LayoutOverride
)

# Artifacts
from .artifact import Artifact

# Recipe metadata
from .recipe import (
    SourceArchive,
    HeadSource,
    Livecheck,
    Dependency,
    CompilerRestriction,
    Deprecation,
    ServiceDescriptor
)

__all__ = [
    # Enums
    'LayoutRole',
    'LayoutScope',
    'BuildPhase',
    'DependencyScope',
    'HostPlatform',

    # Identity
    'Version',
    'Package',
    'Keg',

    # Layout
    'CONFIGURE_FLAG_ROLES',
    'ResolvedPath',
    'LayoutOverride',

    # Artifacts
    'Artifact',

    # Recipe metadata
    'SourceArchive',
    'HeadSource',
    'Livecheck',
    'Dependency',
    'CompilerRestriction',
    'Deprecation',
    'ServiceDescriptor',
]
