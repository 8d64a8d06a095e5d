"""
postgis@16 formula tests.

The install flow runs against a RecordingRunner whose `make install`
response writes the files a real PostGIS build would, so the alias link,
the utility scripts and the renaming can be checked on disk.
"""

from pathlib import Path

import pytest

from exceptions import BuildError, ResourceNotFoundError, SmokeTestFailure
from formulae.postgis_at_16 import UTILITY_SCRIPTS, PostgisAt16
from infrastructure.build_environment import BuildEnvironment
from services.smoke_test_harness import SmokeTestHarness
from tests.factories.fakes import RecordingRunner, matches, probe_factory
from tests.factories.model_factories import make_context, make_harness_config

POSTGIS_SQL = (
    "DO $$ BEGIN\n"
    "  IF current_setting('server_version_num')::integer / 10000 <> 16 THEN\n"
    "    RAISE EXCEPTION 'PostGIS built for PostgreSQL % cannot be loaded in PostgreSQL %',\n"
    "      16.3, current_setting('server_version');\n"
    "  END IF;\n"
    "END $$;\n"
)

SHP2PGSQL_OUTPUT = (
    "SET CLIENT_ENCODING TO UTF8;\n"
    "BEGIN;\n"
    "CREATE TABLE \"brew\" (gid serial,\n\"name\" varchar(10));\n"
    "SELECT AddGeometryColumn('','brew','geom','0','POINT',2);\n"
    "INSERT INTO \"brew\" (\"name\",geom) VALUES ('Point','0101000000');\n"
    "COMMIT;\n"
)


@pytest.fixture
def buildpath(tmp_path):
    src = tmp_path / "postgis-3.4.2"
    (src / "utils").mkdir(parents=True)
    for script in UTILITY_SCRIPTS:
        (src / script).write_text(f"#!/usr/bin/perl\n# {script}\n")
    return src


@pytest.fixture
def formula(context, runner, buildpath):
    return PostgisAt16(context, runner, BuildEnvironment({}), buildpath)


def _fake_make_install(formula, seen):
    """`make install` effect: write what PostGIS installs into the keg."""
    def effect(argv):
        bin_dir = formula.bin
        seen["alias"] = (bin_dir / "postgres").is_symlink()
        seen["alias_target"] = str((bin_dir / "postgres").readlink()) if seen["alias"] else None
        for tool in ("shp2pgsql", "pgsql2shp", "raster2pgsql"):
            (bin_dir / tool).write_text(tool)
        formula.man1.mkdir(parents=True)
        (formula.man1 / "shp2pgsql.1").write_text(".TH SHP2PGSQL 1")
        formula.extension_sql_dir.mkdir(parents=True)
        (formula.extension_sql_dir / "postgis.sql").write_text(POSTGIS_SQL)
        libdir = formula.prefix / "lib" / "postgresql@16"
        libdir.mkdir(parents=True)
        (libdir / "postgis-3.so").write_bytes(b"\x7fELF")
    return effect


class TestIdentity:
    def test_name_version_revision(self, formula, context):
        assert formula.name == "postgis@16"
        assert formula.package.pkg_version == "3.4.2_2"
        assert formula.prefix == context.cellar / "postgis@16" / "3.4.2_2"

    def test_engine(self, formula, context):
        assert formula.engine_name == "postgresql@16"
        assert formula.engine_major == 16
        assert formula.engine_opt_bin == context.prefix / "opt" / "postgresql@16" / "bin"

    def test_head_adds_autotools(self, tmp_path):
        formula = PostgisAt16(make_context(tmp_path, head=True), RecordingRunner())
        assert {"autoconf", "automake", "libtool"} <= set(formula.dependency_names())

    def test_release_build_has_no_autotools(self, formula):
        assert "autoconf" not in formula.dependency_names()

    def test_fails_with_gcc_5(self):
        assert [(r.compiler, r.version) for r in PostgisAt16.fails_with] == [("gcc", "5")]


class TestLayout:
    def test_install_args(self, formula):
        keg = formula.prefix
        assert formula.install_args() == [
            "install",
            f"bindir={keg}/bin",
            f"docdir={keg}/share/doc/postgis@16",
            f"mandir={keg}/share/man",
            f"pkglibdir={keg}/lib/postgresql@16",
            f"datadir={keg}/share/postgresql@16",
            f"PG_SHAREDIR={keg}/share/postgresql@16",
        ]

    def test_extension_sql_dir(self, formula):
        assert formula.extension_sql_dir == formula.prefix / "share" / "postgresql@16" / "contrib" / "postgis-3.4"

    def test_datadir_suffix_matches_engine_configure_datadir(self, formula, context):
        engine = formula.engine(context, RecordingRunner())
        shared = Path(engine.shared_datadir)
        installed = Path(formula.install_layout().path("datadir"))
        assert shared.relative_to(context.prefix) == installed.relative_to(formula.prefix)


class TestBuildArguments:
    def test_configure_args(self, formula, context):
        opt = context.prefix / "opt"
        keg = formula.prefix
        assert formula.configure_args() == [
            f"--with-projdir={opt}/proj",
            f"--with-jsondir={opt}/json-c",
            f"--with-pgconfig={opt}/postgresql@16/bin/pg_config",
            f"--with-protobufdir={opt}/protobuf-c/bin",
            "--disable-nls",
            "--disable-debug",
            "--disable-dependency-tracking",
            f"--prefix={keg}",
            f"--libdir={keg}/lib",
        ]

    def test_build_commands_release(self, formula):
        commands = formula.build_commands()
        assert [c[0] for c in commands] == ["./configure", "make", "make"]
        assert commands[1] == ["make"]
        assert commands[2][1] == "install"

    def test_build_commands_head(self, tmp_path):
        formula = PostgisAt16(make_context(tmp_path, head=True), RecordingRunner())
        assert formula.build_commands()[0] == ["./autogen.sh"]


class TestEnvironment:
    GRAPH = {"sfcgal": ["cgal", "llvm"], "gdal": ["llvm@17", "proj"], "cgal": ["gmp"]}

    def _formula(self, tmp_path, clang):
        context = make_context(tmp_path, clang_build_version=clang, dependency_graph=self.GRAPH)
        opt = context.prefix / "opt"
        env = BuildEnvironment({
            "HOMEBREW_LIBRARY_PATHS": f"{opt}/llvm/lib:{opt}/zstd/lib:{opt}/llvm@17/lib",
        })
        return PostgisAt16(context, RecordingRunner(), env), opt

    def test_llvm_dropped_from_library_paths_on_clang_1500(self, tmp_path):
        formula, opt = self._formula(tmp_path, 1500)
        formula.prepare_environment()
        assert formula.env["HOMEBREW_LIBRARY_PATHS"] == f"{opt}/zstd/lib"

    def test_llvm_kept_on_older_clang(self, tmp_path):
        formula, opt = self._formula(tmp_path, 1403)
        formula.prepare_environment()
        assert formula.env["HOMEBREW_LIBRARY_PATHS"] == f"{opt}/llvm/lib:{opt}/zstd/lib:{opt}/llvm@17/lib"

    def test_llvm_kept_without_clang(self, tmp_path):
        formula, opt = self._formula(tmp_path, None)
        formula.prepare_environment()
        assert f"{opt}/llvm/lib" in formula.env["HOMEBREW_LIBRARY_PATHS"]

    def test_serial_make_and_cxx17(self, formula, context):
        formula.env.set("CXXFLAGS", "-O2")
        formula.prepare_environment()
        assert formula.env["MAKEFLAGS"] == "-j1"
        assert formula.env["CXXFLAGS"] == "-O2 -std=c++17"
        assert formula.env["PROTOCC"] == str(context.prefix / "opt" / "protobuf" / "bin" / "protoc")


class TestInstall:
    def test_full_install(self, formula, runner, buildpath):
        seen = {}
        runner.respond(matches("make", "install"), effect=_fake_make_install(formula, seen))

        formula.install()

        assert runner.programs == ["configure", "make", "make"]
        assert all(call.cwd == str(buildpath) for call in runner.calls)
        assert all(call.env["MAKEFLAGS"] == "-j1" for call in runner.calls)

        # Alias existed during make install and is gone afterwards
        assert seen["alias"] is True
        assert seen["alias_target"] == str(formula.engine_opt_bin / "postgres")
        assert not (formula.bin / "postgres").is_symlink()
        assert not any(p.name.startswith("postgres") for p in formula.bin.iterdir())

        assert sorted(p.name for p in formula.bin.iterdir()) == sorted([
            "pgsql2shp-16", "raster2pgsql-16", "shp2pgsql-16",
            "create_upgrade-16.pl", "postgis_restore-16.pl", "profile_intersects-16.pl",
            "test_estimation-16.pl", "test_geography_estimation-16.pl",
            "test_geography_joinestimation-16.pl", "test_joinestimation-16.pl",
        ])
        assert [p.name for p in formula.man1.iterdir()] == ["shp2pgsql-16.1"]

    def test_extension_files_not_renamed(self, formula, runner):
        runner.respond(matches("make", "install"), effect=_fake_make_install(formula, {}))
        formula.install()
        assert [p.name for p in formula.extension_sql_dir.iterdir()] == ["postgis.sql"]
        assert [p.name for p in (formula.prefix / "lib" / "postgresql@16").iterdir()] == ["postgis-3.so"]

    def test_scripts_moved_out_of_buildpath(self, formula, runner, buildpath):
        formula.install()
        assert list((buildpath / "utils").iterdir()) == []

    def test_alias_removed_when_make_fails(self, formula, runner, buildpath):
        runner.respond(matches("make"), returncode=2, stderr="ld: library not found for -lpostgres")
        with pytest.raises(BuildError):
            formula.install()
        assert not (formula.bin / "postgres").is_symlink()
        assert list(formula.bin.iterdir()) == []
        # Scripts are installed only after a successful build
        assert len(list((buildpath / "utils").iterdir())) == len(UTILITY_SCRIPTS)

    def test_missing_utility_script(self, formula, runner, buildpath):
        (buildpath / "utils" / "postgis_restore.pl").unlink()
        with pytest.raises(ResourceNotFoundError, match="postgis_restore.pl"):
            formula.install()

    def test_head_install_runs_autogen_first(self, tmp_path, buildpath):
        runner = RecordingRunner()
        formula = PostgisAt16(make_context(tmp_path, head=True), runner, BuildEnvironment({}), buildpath)
        formula.install()
        assert runner.commands[0] == ["./autogen.sh"]


class TestSmokeTest:
    @pytest.fixture
    def installed(self, formula):
        formula.extension_sql_dir.mkdir(parents=True)
        (formula.extension_sql_dir / "postgis.sql").write_text(POSTGIS_SQL)
        return formula

    @pytest.fixture
    def scripted(self, runner):
        seen = {}

        def shp2pgsql(argv):
            shp = Path(argv[1])
            seen["shp"] = shp.name
            seen["fixtures"] = sorted(p.name for p in shp.parent.iterdir())

        def initdb(argv):
            datadir = Path(argv[argv.index("-D") + 1])
            datadir.mkdir(parents=True)
            (datadir / "postgresql.conf").write_text("")

        runner.respond(matches("shp2pgsql-16"), stdout=SHP2PGSQL_OUTPUT, effect=shp2pgsql)
        runner.respond(matches("pg_ctl", "initdb"), effect=initdb)
        return seen

    def _harness(self, runner, versions=None, **config):
        factory = probe_factory(versions) if versions is not None else None
        return SmokeTestHarness(
            runner=runner,
            config=make_harness_config(**config),
            env=BuildEnvironment({}),
            probe_factory=factory,
            name="postgis@16",
        )

    def test_passes(self, installed, runner, scripted):
        with self._harness(runner) as t:
            installed.test(t)
        assert scripted["shp"] == "brew.shp"
        assert scripted["fixtures"] == ["brew.dbf", "brew.shp", "brew.shx"]
        assert runner.programs == ["shp2pgsql-16", "pg_ctl", "pg_ctl", "psql", "pg_ctl"]

        psql = runner.find("psql")[0].argv
        port = psql[2]
        assert psql[1:] == ["-p", port, "-c", 'CREATE EXTENSION "postgis";', "postgres"]
        assert runner.commands[-1][1] == "stop"

    def test_engine_tools_come_from_opt(self, installed, runner, scripted):
        with self._harness(runner) as t:
            installed.test(t)
        opt_bin = str(installed.engine_opt_bin)
        assert runner.find("pg_ctl")[0].argv[0] == f"{opt_bin}/pg_ctl"
        assert runner.find("psql")[0].argv[0] == f"{opt_bin}/psql"

    def test_preload_setting_written(self, installed, runner, scripted):
        confs = []
        runner.respond(
            matches("pg_ctl", "start"),
            effect=lambda argv: confs.append(Path(argv[argv.index("-D") + 1], "postgresql.conf").read_text()),
        )
        with self._harness(runner) as t:
            installed.test(t)
        assert "shared_preload_libraries = 'postgis-3'\n" in confs[0]
        assert "\nport = " in confs[0]

    def test_extension_version_verified(self, installed, runner, scripted):
        with self._harness(runner, versions={"postgis": "3.4.2"}, verify_extension=True) as t:
            installed.test(t)

    def test_wrong_extension_version_fails_and_stops_cluster(self, installed, runner, scripted):
        with self._harness(runner, versions={"postgis": "3.3.4"}, verify_extension=True) as t:
            with pytest.raises(SmokeTestFailure) as excinfo:
                installed.test(t)
        assert excinfo.value.expected == "3.4"
        assert excinfo.value.actual == "3.3"
        assert runner.commands[-1][1] == "stop"

    def test_failed_create_extension_stops_cluster(self, installed, runner, scripted):
        runner.respond(matches("psql"), returncode=1, stderr='ERROR:  could not load library "postgis-3.so"')
        with self._harness(runner) as t:
            with pytest.raises(BuildError):
                installed.test(t)
        assert runner.commands[-1][1] == "stop"

    def test_sql_built_for_other_major_fails(self, formula, runner, scripted):
        formula.extension_sql_dir.mkdir(parents=True)
        (formula.extension_sql_dir / "postgis.sql").write_text(POSTGIS_SQL.replace("16.3", "15.7"))
        with self._harness(runner) as t:
            with pytest.raises(SmokeTestFailure):
                formula.test(t)
        assert runner.calls == []

    def test_missing_point_output_fails_before_cluster(self, installed, runner, scripted):
        runner.respond(matches("shp2pgsql-16"), stdout="Shapefile type: Polygon\n")
        with self._harness(runner) as t:
            with pytest.raises(SmokeTestFailure):
                installed.test(t)
        assert "pg_ctl" not in runner.programs
