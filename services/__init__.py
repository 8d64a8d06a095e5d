"""
Services Package - Lazy Loading.

Build-time services used by the formulae and by the orchestration layer:

    binary_alias            BinaryAliasLink (scoped symlink)
    artifact_disambiguator  ArtifactDisambiguator (suffix renames)
    smoke_test_harness      SmokeTestHarness (testpath, assertions, cluster)
    livecheck_service       LivecheckService (upstream version discovery)
    formula_builder         FormulaBuild, run_smoke_tests (orchestration)

Formulae import the first three while formula_builder imports the formulae,
so nothing is imported eagerly here.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .binary_alias import BinaryAliasLink as _BinaryAliasLink
    from .artifact_disambiguator import ArtifactDisambiguator as _ArtifactDisambiguator
    from .smoke_test_harness import SmokeTestHarness as _SmokeTestHarness
    from .livecheck_service import LivecheckService as _LivecheckService
    from .formula_builder import FormulaBuild as _FormulaBuild


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "BinaryAliasLink":
        from .binary_alias import BinaryAliasLink
        return BinaryAliasLink
    elif name == "ArtifactDisambiguator":
        from .artifact_disambiguator import ArtifactDisambiguator
        return ArtifactDisambiguator
    elif name == "SmokeTestHarness":
        from .smoke_test_harness import SmokeTestHarness
        return SmokeTestHarness
    elif name == "LivecheckService":
        from .livecheck_service import LivecheckService
        return LivecheckService
    elif name == "FormulaBuild":
        from .formula_builder import FormulaBuild
        return FormulaBuild
    elif name == "run_smoke_tests":
        from .formula_builder import run_smoke_tests
        return run_smoke_tests

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "BinaryAliasLink",
    "ArtifactDisambiguator",
    "SmokeTestHarness",
    "LivecheckService",
    "FormulaBuild",
    "run_smoke_tests",
]
