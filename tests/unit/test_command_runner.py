"""
Command runner tests against real /bin/sh processes.
"""

import pytest

from exceptions import BuildError
from infrastructure.build_environment import BuildEnvironment
from infrastructure.command_runner import CommandRunner


@pytest.fixture
def real_runner():
    return CommandRunner(timeout=30)


class TestRun:
    def test_captures_stdout(self, real_runner):
        result = real_runner.run("sh", "-c", "printf hello")
        assert result.ok
        assert result.stdout == "hello"

    def test_nonzero_status_returned(self, real_runner):
        result = real_runner.run("sh", "-c", "echo oops >&2; exit 3")
        assert result.returncode == 3
        assert result.stderr.strip() == "oops"
        assert not result.ok

    def test_missing_executable_is_127(self, real_runner, tmp_path):
        result = real_runner.run(tmp_path / "no-such-tool")
        assert result.returncode == 127

    def test_non_executable_is_126(self, real_runner, tmp_path):
        tool = tmp_path / "initdb"
        tool.write_text("#!/bin/sh\nexit 0\n")
        tool.chmod(0o644)
        result = real_runner.run(tool)
        assert result.returncode == 126
        assert result.stderr

    def test_cwd_not_a_directory_is_126(self, real_runner, tmp_path):
        not_a_dir = tmp_path / "file"
        not_a_dir.write_text("")
        assert real_runner.run("pwd", cwd=not_a_dir).returncode == 126

    def test_path_arguments_stringified(self, real_runner, tmp_path):
        result = real_runner.run("sh", "-c", 'printf %s "$0"', tmp_path)
        assert result.args[-1] == str(tmp_path)
        assert result.stdout == str(tmp_path)

    def test_cwd(self, real_runner, tmp_path):
        assert real_runner.run("pwd", cwd=tmp_path).stdout.strip() == str(tmp_path.resolve())

    def test_build_environment_passed(self, real_runner):
        env = BuildEnvironment({"PATH": "/usr/bin:/bin", "FORMULA_VALUE": "from-env"})
        result = real_runner.run("sh", "-c", 'printf %s "$FORMULA_VALUE"', env=env)
        assert result.stdout == "from-env"

    def test_plain_mapping_env(self, real_runner):
        result = real_runner.run("sh", "-c", 'printf %s "${FORMULA_VALUE-unset}"',
                                 env={"PATH": "/usr/bin:/bin"})
        assert result.stdout == "unset"

    def test_input_fed_to_stdin(self, real_runner):
        assert real_runner.run("cat", input="fixture\n").stdout == "fixture\n"


class TestSystem:
    def test_nonzero_raises_build_error(self, real_runner):
        with pytest.raises(BuildError) as excinfo:
            real_runner.system("sh", "-c", "echo partial; echo broken >&2; exit 2")
        error = excinfo.value
        assert error.returncode == 2
        assert error.args_list[0] == "sh"
        assert error.stdout.strip() == "partial"
        assert "broken" in error.output
        assert "exit status 2" in str(error)

    def test_shell_output_returns_stdout(self, real_runner):
        assert real_runner.shell_output("sh", "-c", "echo 16.3") == "16.3\n"

    def test_missing_executable_raises(self, real_runner, tmp_path):
        with pytest.raises(BuildError) as excinfo:
            real_runner.system(tmp_path / "pg_ctl")
        assert excinfo.value.returncode == 127

    def test_non_executable_raises(self, real_runner, tmp_path):
        tool = tmp_path / "pg_ctl"
        tool.write_text("#!/bin/sh\nexit 0\n")
        tool.chmod(0o600)
        with pytest.raises(BuildError) as excinfo:
            real_runner.system(tool, "start")
        assert excinfo.value.returncode == 126
