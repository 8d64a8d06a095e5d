"""
postgis@16 - PostGIS built against postgresql@16.

Cannot be keg-only: its extension files have to be linked into
`{prefix}/share/postgresql@16/contrib/postgis-3.4` and
`{prefix}/lib/postgresql@16` for the engine to find them. In exchange its
executables and man pages are renamed with the engine major (`shp2pgsql-16`,
`shp2pgsql-16.1`) so several PostGIS formulae can be linked side by side,
which `pg_upgrade` across engine majors needs.

PGXS assumes PostGIS is installed where PostgreSQL is and links against the
`postgres` executable found relative to the install bindir; a temporary alias
in the keg's bin satisfies it.
"""

import re
import shutil
from pathlib import Path
from typing import List, Optional

from core.logic.layout_resolver import resolve_layout
from core.models.enums import BuildPhase, DependencyScope, LayoutRole
from core.models.layout import LayoutOverride
from core.models.package import Package
from core.models.version import Version
from core.models.recipe import (
    CompilerRestriction,
    Dependency,
    HeadSource,
    Livecheck,
    SourceArchive,
)
from exceptions import ResourceNotFoundError
from services.artifact_disambiguator import ArtifactDisambiguator
from services.binary_alias import BinaryAliasLink

from .base import FormulaBase
from .fixtures import SHAPEFILE
from .postgresql_at_16 import PostgresqlAt16

# Xcode 15 (clang 1500) links against LLVM's libunwind when it is on the library path
LIBUNWIND_CLANG_BUILD = 1500

LLVM_FORMULA = re.compile(r"^llvm(@\d+)?$")

INSTALL_LAYOUT_ROLES = [
    LayoutRole.BINDIR,
    LayoutRole.DOCDIR,
    LayoutRole.MANDIR,
    LayoutRole.PKGLIBDIR,
    LayoutRole.DATADIR,
    LayoutRole.PG_SHAREDIR,
]

UTILITY_SCRIPTS = [
    "utils/create_upgrade.pl",
    "utils/postgis_restore.pl",
    "utils/profile_intersects.pl",
    "utils/test_estimation.pl",
    "utils/test_geography_estimation.pl",
    "utils/test_geography_joinestimation.pl",
    "utils/test_joinestimation.pl",
]


class PostgisAt16(FormulaBase):
    """Adds support for geographic objects to PostgreSQL 16."""

    engine = PostgresqlAt16

    package = Package(family="postgis", major=16, version="3.4.2", revision=2)
    desc = "Adds support for geographic objects to PostgreSQL"
    homepage = "https://postgis.net/"
    license = "GPL-2.0-or-later"
    source = SourceArchive(
        url="https://download.osgeo.org/postgis/source/postgis-3.4.2.tar.gz",
        sha256="c8c874c00ba4a984a87030af6bf9544821502060ad473d5c96f1d4d0835c5892",
    )
    head = HeadSource(
        url="https://git.osgeo.org/gitea/postgis/postgis.git",
        branch="master",
        dependencies=[
            Dependency(name="autoconf", scope=DependencyScope.BUILD),
            Dependency(name="automake", scope=DependencyScope.BUILD),
            Dependency(name="libtool", scope=DependencyScope.BUILD),
        ],
    )
    livecheck = Livecheck(
        url="https://download.osgeo.org/postgis/source/",
        regex=r"href=.*?postgis[._-]v?(\d+(?:\.\d+)+)\.t",
    )

    dependencies = [
        Dependency(name="gpp", scope=DependencyScope.BUILD),
        Dependency(name="pkg-config", scope=DependencyScope.BUILD),
        Dependency(name="gdal", comment="GeoJSON and raster handling"),
        Dependency(name="geos"),
        Dependency(name="icu4c"),
        Dependency(name="json-c", comment="GeoJSON and raster handling"),
        Dependency(name="pcre2"),
        Dependency(name="postgresql@16"),
        Dependency(name="proj"),
        Dependency(name="protobuf-c", comment="MVT (map vector tiles) support"),
        Dependency(name="sfcgal", comment="advanced 2D/3D functions"),
    ]
    fails_with = [CompilerRestriction(compiler="gcc", version="5", reason="C++17")]

    @property
    def engine_name(self) -> str:
        return self.engine.formula_name()

    @property
    def engine_major(self) -> int:
        return self.engine.package.parsed_version.major

    @property
    def engine_opt_bin(self):
        return self.context.opt_bin(self.engine_name)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def install_layout(self) -> LayoutOverride:
        """Install-phase overrides: the engine's shared roles, inside this keg."""
        return resolve_layout(
            self.homebrew_prefix,
            self.engine.package.family,
            self.engine.package.major,
            BuildPhase.INSTALL,
            keg_root=self.prefix,
            package_name=self.name,
            roles=INSTALL_LAYOUT_ROLES,
        )

    @property
    def extension_sql_dir(self) -> Path:
        """contrib dir of this PostGIS major.minor in the keg's shared datadir."""
        datadir = Path(self.install_layout().path(LayoutRole.DATADIR))
        return datadir / "contrib" / f"postgis-{self.version.major_minor}"

    # ------------------------------------------------------------------
    # Build arguments
    # ------------------------------------------------------------------

    def prepare_environment(self) -> None:
        ctx = self.context
        clang = ctx.clang_build_version
        if clang is not None and clang >= LIBUNWIND_CLANG_BUILD:
            for dep in ctx.recursive_dependencies(self.dependency_names()):
                if LLVM_FORMULA.match(dep):
                    if self.env.remove_path_entry("HOMEBREW_LIBRARY_PATHS", ctx.opt_lib(dep)):
                        self.logger.info(f"Dropped {dep} from the library search path")

        self.env.deparallelize()
        self.env.append("CXXFLAGS", "-std=c++17")
        # protobuf-c's generator rejects newer protoc editions otherwise
        self.env.set("PROTOCC", ctx.opt_bin("protobuf") / "protoc")

    def configure_args(self) -> List[str]:
        ctx = self.context
        args = [
            f"--with-projdir={ctx.opt_prefix('proj')}",
            f"--with-jsondir={ctx.opt_prefix('json-c')}",
            f"--with-pgconfig={self.engine_opt_bin / 'pg_config'}",
            f"--with-protobufdir={ctx.opt_bin('protobuf-c')}",
            # PGXS supplies the compiler flags, so keg-only gettext cannot be found
            "--disable-nls",
        ]
        return args + self.std_configure_args()

    def install_args(self) -> List[str]:
        return ["install"] + self.install_layout().make_variables()

    def build_commands(self) -> List[List[str]]:
        commands = [["./autogen.sh"]] if self.context.head else []
        commands += [
            ["./configure"] + self.configure_args(),
            ["make"],
            ["make"] + self.install_args(),
        ]
        return commands

    def install(self) -> None:
        self.prepare_environment()

        with BinaryAliasLink(self.bin, self.engine_opt_bin / "postgres"):
            for argv in self.build_commands():
                self.system(*argv)

        self.install_utility_scripts()
        self.disambiguate()

    def install_utility_scripts(self) -> None:
        source_root = self.buildpath or Path.cwd()
        self.bin.mkdir(parents=True, exist_ok=True)
        for script in UTILITY_SCRIPTS:
            source = source_root / script
            if not source.exists():
                raise ResourceNotFoundError(f"Utility script {script} missing from {source_root}")
            shutil.move(str(source), str(self.bin / source.name))

    def disambiguate(self):
        disambiguator = ArtifactDisambiguator(self.engine_major)
        return (
            disambiguator.disambiguate_directory(self.bin)
            + disambiguator.disambiguate_directory(self.man1)
        )

    # ------------------------------------------------------------------
    # Smoke test
    # ------------------------------------------------------------------

    def test(self, t) -> None:
        expected = re.compile(
            r"'PostGIS built for PostgreSQL % cannot be loaded in PostgreSQL %',\s+"
            rf"{self.engine_major}\.\d,"
        )
        t.assert_file_match(expected, self.extension_sql_dir / "postgis.sql", "postgis.sql version check")

        for filename, data in SHAPEFILE.items():
            t.write_base64(filename, data)
        shp2pgsql = self.bin / f"shp2pgsql-{self.engine_major}"
        result = t.shell_output(shp2pgsql, t.testpath / "brew.shp")
        t.assert_match("Point", result, "shp2pgsql output")
        t.assert_match("AddGeometryColumn", result, "shp2pgsql output")

        pg_ctl = self.engine_opt_bin / "pg_ctl"
        psql = self.engine_opt_bin / "psql"
        port = t.free_port()

        with t.ephemeral_cluster(pg_ctl, port, {"shared_preload_libraries": "'postgis-3'"}):
            t.system(psql, "-p", str(port), "-c", 'CREATE EXTENSION "postgis";', t.config.database)
            if t.config.verify_extension:
                installed = t.extension_probe(port).installed_version("postgis")
                t.assert_equal(
                    self.version.major_minor,
                    _major_minor(installed),
                    "pg_extension postgis version",
                )


def _major_minor(version: Optional[str]) -> Optional[str]:
    return Version(version).major_minor if version else None
