"""
Smoke-Test Harness Configuration.

Exports:
    HarnessConfig: Pydantic harness configuration model
"""

import os
from pydantic import BaseModel, Field

from config.defaults import HarnessDefaults


class HarnessConfig(BaseModel):
    """
    Settings for the throwaway cluster a smoke test starts.

    The port is never configured: each run asks the OS for a free one.
    """

    host: str = Field(
        default=HarnessDefaults.HOST,
        description="Host the ephemeral cluster listens on"
    )

    database: str = Field(
        default=HarnessDefaults.DATABASE,
        description="Database psql connects to when loading the extension"
    )

    cluster_dirname: str = Field(
        default=HarnessDefaults.CLUSTER_DIRNAME,
        description="Data directory name below the test path"
    )

    log_filename: str = Field(
        default=HarnessDefaults.LOG_FILENAME,
        description="Server log file name below the test path (pg_ctl -l)"
    )

    keep_testpath: bool = Field(
        default=HarnessDefaults.KEEP_TESTPATH,
        description="Leave the test path on disk after the run, for debugging"
    )

    verify_extension: bool = Field(
        default=HarnessDefaults.VERIFY_EXTENSION,
        description="Query pg_extension through psycopg after CREATE EXTENSION"
    )

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            host=os.environ.get("FORMULA_TEST_HOST", HarnessDefaults.HOST),
            database=os.environ.get("FORMULA_TEST_DATABASE", HarnessDefaults.DATABASE),
            keep_testpath=os.environ.get("FORMULA_KEEP_TESTPATH", "false").lower() == "true",
            verify_extension=os.environ.get("FORMULA_VERIFY_EXTENSION", "true").lower() == "true",
        )
