"""
PostgreSQL Extension Probe.

Direct psycopg 3 access to the throwaway cluster a smoke test starts, used
to confirm that `CREATE EXTENSION` actually registered the extension at the
expected version. Queries are composed with psycopg.sql.

Exports:
    ExtensionProbe: Read pg_extension on an ephemeral cluster
"""

from contextlib import contextmanager
from typing import Optional

import psycopg
from psycopg import sql
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row

from exceptions import DatabaseError
from util_logger import ComponentType, LoggerFactory

logger = LoggerFactory.create_logger(ComponentType.HARNESS, "extension_probe")


class ExtensionProbe:
    """
    Read-only queries against a running cluster.

    Args:
        port: Port the cluster listens on
        host: Host name (TCP); the cluster's default listen address is localhost
        dbname: Database to connect to
        connect_timeout: Seconds before giving up on the connection
    """

    def __init__(self, port: int, host: str = "localhost", dbname: str = "postgres",
                 connect_timeout: int = 10):
        self.conninfo = make_conninfo(
            host=host,
            port=str(port),
            dbname=dbname,
            connect_timeout=str(connect_timeout),
        )

    @contextmanager
    def _get_connection(self):
        """Autocommit connection, always closed."""
        conn = None
        try:
            conn = psycopg.connect(self.conninfo, row_factory=dict_row, autocommit=True)
            yield conn
        except psycopg.Error as e:
            logger.error(f"PostgreSQL error: {e}")
            raise DatabaseError(f"Extension probe failed: {e}") from e
        finally:
            if conn is not None:
                conn.close()

    def installed_version(self, extname: str) -> Optional[str]:
        """extversion of extname in pg_extension, or None if not installed."""
        query = sql.SQL("SELECT extversion FROM {} WHERE extname = %s").format(
            sql.Identifier("pg_catalog", "pg_extension")
        )
        with self._get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(query, (extname,))
                row = cur.fetchone()
        version = row["extversion"] if row else None
        logger.debug(f"pg_extension {extname}: {version}")
        return version
