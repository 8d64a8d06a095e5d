"""
postgresql@16 - the database engine.

Not keg-only: the keg is linked into the prefix, and the engine loads
extensions from `{prefix}/share/postgresql@16` and `{prefix}/lib/postgresql@16`
rather than from its own keg. Any extension built for PostgreSQL 16 can
then install into the same two directories and be found at runtime.

The build is told the prefix paths (configure phase) but `make install-world`
writes into the keg (install phase); linking the keg turns one into the
other. See core.logic.layout_resolver.
"""

import datetime
from typing import List, Optional

from core.logic.layout_resolver import resolve_layout
from core.models.enums import BuildPhase, DependencyScope, HostPlatform, LayoutRole
from core.models.layout import LayoutOverride
from core.models.package import Package
from core.models.recipe import (
    Dependency,
    Deprecation,
    Livecheck,
    ServiceDescriptor,
    SourceArchive,
)

from .base import FormulaBase

CONFIGURE_LAYOUT_ROLES = [
    LayoutRole.DATADIR,
    LayoutRole.LIBDIR,
    LayoutRole.INCLUDEDIR,
    LayoutRole.SYSCONFDIR,
    LayoutRole.DOCDIR,
]

# Makefile.global.in guesses pkglibdir wrong for prefixes containing "postgres"
MAKE_LAYOUT_ROLES = [
    LayoutRole.DATADIR,
    LayoutRole.PKGLIBDIR,
    LayoutRole.PKGINCLUDEDIR,
    LayoutRole.INCLUDEDIR_SERVER,
]

INSTALL_LAYOUT_ROLES = [
    LayoutRole.DATADIR,
    LayoutRole.LIBDIR,
    LayoutRole.PKGLIBDIR,
    LayoutRole.INCLUDEDIR,
    LayoutRole.PKGINCLUDEDIR,
    LayoutRole.INCLUDEDIR_SERVER,
    LayoutRole.INCLUDEDIR_INTERNAL,
]

FEATURE_FLAGS = [
    "--enable-nls",
    "--enable-thread-safety",
    "--with-gssapi",
    "--with-icu",
    "--with-ldap",
    "--with-libxml",
    "--with-libxslt",
    "--with-lz4",
    "--with-zstd",
    "--with-openssl",
    "--with-pam",
    "--with-perl",
    "--with-uuid=e2fs",
]

MACOS_FEATURE_FLAGS = [
    "--with-bonjour",
    "--with-tcl",
]


class PostgresqlAt16(FormulaBase):
    """Object-relational database system, major version 16."""

    package = Package(family="postgresql", major=16, version="16.3")
    desc = "Object-relational database system"
    homepage = "https://www.postgresql.org/"
    license = "PostgreSQL"
    source = SourceArchive(
        url="https://ftp.postgresql.org/pub/source/v16.3/postgresql-16.3.tar.bz2",
        sha256="331963d5d3dc4caf4216a049fa40b66d6bcb8c730615859411b9518764e60585",
    )
    livecheck = Livecheck(
        url="https://ftp.postgresql.org/pub/source/",
        regex=r"""href=["']?v?(16(?:\.\d+)+)/?["' >]""",
    )
    # https://www.postgresql.org/support/versioning/
    deprecation = Deprecation(date=datetime.date(2028, 11, 9), because="unsupported")

    dependencies = [
        Dependency(name="pkg-config", scope=DependencyScope.BUILD),
        Dependency(name="gettext"),
        Dependency(name="icu4c"),
        Dependency(
            name="krb5",
            comment="GSSAPI from Kerberos.framework crashes when forked",
        ),
        Dependency(name="lz4"),
        Dependency(name="openssl@3"),
        Dependency(name="readline"),
        Dependency(name="zstd"),
        Dependency(name="libxml2", uses_from_macos=True),
        Dependency(name="libxslt", uses_from_macos=True),
        Dependency(name="openldap", uses_from_macos=True),
        Dependency(name="perl", uses_from_macos=True),
        Dependency(name="linux-pam", platform=HostPlatform.LINUX),
        Dependency(name="util-linux", platform=HostPlatform.LINUX),
    ]

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def layout(self, phase: BuildPhase, roles=None) -> LayoutOverride:
        return resolve_layout(
            self.homebrew_prefix,
            self.package.family,
            self.package.major,
            phase,
            keg_root=self.prefix,
            package_name=self.name,
            roles=roles,
        )

    @property
    def shared_datadir(self) -> str:
        """Where the engine (and its extensions) keep share files at runtime."""
        return self.layout(BuildPhase.CONFIGURE, [LayoutRole.DATADIR]).path(LayoutRole.DATADIR)

    @property
    def shared_libdir(self) -> str:
        return self.layout(BuildPhase.CONFIGURE, [LayoutRole.LIBDIR]).path(LayoutRole.LIBDIR)

    # ------------------------------------------------------------------
    # Build arguments
    # ------------------------------------------------------------------

    def prepare_environment(self) -> None:
        ctx = self.context
        self.env.delete("PKG_CONFIG_LIBDIR")
        self.env.prepend("LDFLAGS", f"-L{ctx.opt_lib('openssl@3')} -L{ctx.opt_lib('readline')}")
        self.env.prepend("CPPFLAGS", f"-I{ctx.opt_include('openssl@3')} -I{ctx.opt_include('readline')}")

        # libintl.h for extensions
        self.env.prepend("LDFLAGS", f"-L{ctx.opt_lib('gettext')}")
        self.env.prepend("CPPFLAGS", f"-I{ctx.opt_include('gettext')}")

    def configure_args(self) -> List[str]:
        args = self.std_configure_args()
        args += self.layout(BuildPhase.CONFIGURE, CONFIGURE_LAYOUT_ROLES).configure_args()
        args += FEATURE_FLAGS
        args.append(f"--with-extra-version= ({self.context.tap_user})")
        if self.context.is_macos:
            args += MACOS_FEATURE_FLAGS
            # Otherwise configure asks xcodebuild, which CLT-only hosts lack
            if self.context.sdk_path:
                args.append(f"PG_SYSROOT={self.context.sdk_path}")
        return args

    def make_args(self) -> List[str]:
        return self.layout(BuildPhase.CONFIGURE, MAKE_LAYOUT_ROLES).make_variables()

    def install_args(self) -> List[str]:
        return ["install-world"] + self.layout(BuildPhase.INSTALL, INSTALL_LAYOUT_ROLES).make_variables()

    def build_commands(self) -> List[List[str]]:
        return [
            ["./configure"] + self.configure_args(),
            ["make"] + self.make_args(),
            ["make"] + self.install_args(),
        ]

    def install(self) -> None:
        self.prepare_environment()
        for argv in self.build_commands():
            self.logger.info(f"Running {' '.join(argv[:2])}")
            self.system(*argv)

    # ------------------------------------------------------------------
    # Post-install, caveats, service
    # ------------------------------------------------------------------

    @property
    def postgresql_datadir(self):
        return self.var / self.name

    @property
    def postgresql_log_path(self):
        return self.var / "log" / f"{self.name}.log"

    def pg_version_exists(self) -> bool:
        return (self.postgresql_datadir / "PG_VERSION").exists()

    def post_install(self) -> None:
        (self.var / "log").mkdir(parents=True, exist_ok=True)
        self.postgresql_datadir.mkdir(parents=True, exist_ok=True)

        # A default cluster clashes with other engine majors tested on the same runner
        if self.context.github_actions:
            self.logger.info("Skipping initdb under GitHub Actions")
            return

        if not self.pg_version_exists():
            self.system(self.bin / "initdb", "--locale=C", "-E", "UTF-8", self.postgresql_datadir)

    def caveats(self) -> Optional[str]:
        return (
            "This formula has created a default database cluster with:\n"
            f"  initdb --locale=C -E UTF-8 {self.postgresql_datadir}\n"
            "For more details, read:\n"
            f"  https://www.postgresql.org/docs/{self.version.major}/app-initdb.html\n"
        )

    def service(self) -> ServiceDescriptor:
        log_path = str(self.postgresql_log_path)
        return ServiceDescriptor(
            run=[str(self.opt_bin / "postgres"), "-D", str(self.postgresql_datadir)],
            environment_variables={"LC_ALL": "C"},
            keep_alive=True,
            log_path=log_path,
            error_log_path=log_path,
            working_dir=str(self.homebrew_prefix),
        )

    # ------------------------------------------------------------------
    # Smoke test
    # ------------------------------------------------------------------

    def test(self, t) -> None:
        pg_config = self.bin / "pg_config"

        def pg_config_value(flag: str) -> str:
            return t.shell_output(pg_config, flag).rstrip("\n")

        if not self.context.github_actions:
            t.system(self.bin / "initdb", t.testpath / t.config.cluster_dirname)

        t.assert_equal(self.shared_datadir, pg_config_value("--sharedir"), "pg_config --sharedir")
        t.assert_equal(self.shared_libdir, pg_config_value("--pkglibdir"), "pg_config --pkglibdir")
        t.assert_equal(self.shared_libdir, pg_config_value("--libdir"), "pg_config --libdir")
        t.assert_equal(
            str(self.opt_include / "postgresql"),
            pg_config_value("--pkgincludedir"),
            "pg_config --pkgincludedir",
        )
        t.assert_equal(
            str(self.opt_include / "postgresql" / "server"),
            pg_config_value("--includedir-server"),
            "pg_config --includedir-server",
        )
        t.assert_match(
            f"-I{self.context.opt_include('gettext')}",
            t.shell_output(pg_config, "--cppflags"),
            "pg_config --cppflags",
        )
