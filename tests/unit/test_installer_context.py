"""
Installer context tests: path derivation, host facts, dependency closure.
"""

from pathlib import Path

from core.models.package import Package
from infrastructure.installer_context import InstallerContext
from tests.factories.model_factories import make_context, make_installer_config


class TestPaths:
    def test_cellar_defaults_below_prefix(self, installer_config):
        context = InstallerContext(installer_config)
        assert context.cellar == Path(installer_config.prefix) / "Cellar"

    def test_keg_for_package(self, context):
        keg = context.keg_for(Package(family="postgis", major=16, version="3.4.2", revision=2))
        assert keg.root == context.cellar / "postgis@16" / "3.4.2_2"

    def test_opt_paths(self, context):
        assert context.opt_lib("openssl@3") == context.prefix / "opt" / "openssl@3" / "lib"
        assert context.opt_include("gettext") == context.prefix / "opt" / "gettext" / "include"


class TestHostFacts:
    def test_facts_come_from_config(self, tmp_path):
        context = make_context(tmp_path, host_platform="linux", clang_build_version=1500,
                               github_actions=True, sdk_path="/sdk")
        assert context.is_linux and not context.is_macos
        assert context.clang_build_version == 1500
        assert context.github_actions
        assert context.sdk_path == "/sdk"

    def test_defaults_to_config_singleton(self, monkeypatch):
        monkeypatch.setenv("HOMEBREW_PREFIX", "/opt/elsewhere")
        monkeypatch.delenv("HOMEBREW_CELLAR", raising=False)
        context = InstallerContext()
        assert context.prefix == Path("/opt/elsewhere")
        assert context.cellar == Path("/opt/elsewhere/Cellar")


class TestDependencyGraph:
    def test_recursive_closure_includes_roots_once(self, tmp_path):
        context = InstallerContext(
            make_installer_config(tmp_path),
            dependency_graph={
                "sfcgal": ["cgal", "gmp"],
                "cgal": ["boost", "gmp"],
                "gdal": ["llvm", "proj"],
                "proj": ["sqlite"],
            },
        )
        closure = context.recursive_dependencies(["sfcgal", "gdal"])
        assert closure == ["sfcgal", "cgal", "boost", "gmp", "gdal", "llvm", "proj", "sqlite"]

    def test_cycles_terminate(self, context):
        context.add_dependencies("a", ["b"])
        context.add_dependencies("b", ["a"])
        assert context.recursive_dependencies(["a"]) == ["a", "b"]

    def test_add_dependencies_merges(self, context):
        context.add_dependencies("gdal", ["proj"])
        context.add_dependencies("gdal", ["proj", "llvm@17"])
        assert context.direct_dependencies("gdal") == ["proj", "llvm@17"]

    def test_unknown_name_has_no_dependencies(self, context):
        assert context.direct_dependencies("zstd") == []
        assert context.recursive_dependencies(["zstd"]) == ["zstd"]
