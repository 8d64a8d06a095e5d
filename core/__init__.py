"""
Core Package.

Pure data models (core.models) and the side-effect-free logic that
operates on them (core.logic). Nothing in this package touches the
filesystem or spawns processes.
"""
