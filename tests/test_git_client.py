"""
Tests for the git client.

The client is executable-agnostic, so most tests point it at the
running Python interpreter to get real processes with controlled exit
codes and output.
"""

import asyncio
import subprocess
import sys
import pytest
from unittest.mock import patch, MagicMock

from commitlog.infra.git_client import (
    GitClient,
    GitProcessError,
    COMMAND_NOT_FOUND,
    TIMED_OUT,
)


@pytest.fixture
def python_client():
    """A client that runs the Python interpreter instead of git."""
    return GitClient(executable=sys.executable)


def script(code: str) -> list:
    return ["-c", code]


class TestGitProcessError:
    """Tests for the error type."""

    def test_message(self):
        err = GitProcessError(128, "fatal: bad revision 'nope'\n", ["log", "nope"])
        assert err.code == 128
        assert err.args_list == ["log", "nope"]
        assert str(err) == "git log failed with exit code 128: fatal: bad revision 'nope'"

    def test_message_without_stderr(self):
        assert str(GitProcessError(1)) == "git failed with exit code 1"


class TestRun:
    """Tests for the synchronous runner."""

    def test_returns_stdout(self, python_client, tmp_path):
        output = python_client.run(script("print('hello')"), cwd=str(tmp_path))
        assert output.strip() == "hello"

    def test_runs_in_cwd(self, python_client, tmp_path):
        output = python_client.run(script("import os; print(os.getcwd())"), cwd=str(tmp_path))
        assert output.strip() == str(tmp_path.resolve())

    def test_preserves_control_characters(self, python_client, tmp_path):
        """Test that separators survive decoding."""
        code = "import sys; sys.stdout.write('a\\x1fb\\x1e')"
        assert python_client.run(script(code), cwd=str(tmp_path)) == "a\x1fb\x1e"

    def test_nonzero_exit(self, python_client, tmp_path):
        """Test that a non-zero exit carries its code."""
        code = "import sys; sys.stderr.write('fatal: nope'); sys.exit(3)"
        with pytest.raises(GitProcessError) as exc_info:
            python_client.run(script(code), cwd=str(tmp_path))
        assert exc_info.value.code == 3
        assert exc_info.value.stderr == "fatal: nope"

    def test_stderr_with_zero_exit_is_not_an_error(self, python_client, tmp_path):
        """Test that warnings on stderr do not fail the synchronous path."""
        code = "import sys; sys.stderr.write('warning'); print('ok')"
        assert python_client.run(script(code), cwd=str(tmp_path)).strip() == "ok"

    def test_missing_executable(self, tmp_path):
        client = GitClient(executable="definitely-not-a-git-binary")
        with pytest.raises(GitProcessError) as exc_info:
            client.run(["log"], cwd=str(tmp_path))
        assert exc_info.value.code == COMMAND_NOT_FOUND

    def test_timeout(self, tmp_path):
        client = GitClient(executable=sys.executable, timeout=0.2)
        with pytest.raises(GitProcessError) as exc_info:
            client.run(script("import time; time.sleep(5)"), cwd=str(tmp_path))
        assert exc_info.value.code == TIMED_OUT

    def test_command_line(self):
        """Test that git is invoked with the arguments as a list."""
        client = GitClient()
        completed = subprocess.CompletedProcess(["git"], 0, stdout=b"out", stderr=b"")
        with patch("commitlog.infra.git_client.subprocess.run", return_value=completed) as mock_run:
            assert client.run(["log", "HEAD"], cwd="/repo") == "out"

        mock_run.assert_called_once()
        assert mock_run.call_args.args[0] == ["git", "log", "HEAD"]
        assert mock_run.call_args.kwargs["cwd"] == "/repo"

    def test_zero_timeout_means_none(self):
        assert GitClient(timeout=0).timeout is None


class TestRunAsync:
    """Tests for the asyncio runner."""

    def test_returns_stdout(self, python_client, tmp_path):
        output = asyncio.run(python_client.run_async(script("print('hello')"), cwd=str(tmp_path)))
        assert output.strip() == "hello"

    def test_nonzero_exit(self, python_client, tmp_path):
        with pytest.raises(GitProcessError) as exc_info:
            asyncio.run(python_client.run_async(script("import sys; sys.exit(4)"), cwd=str(tmp_path)))
        assert exc_info.value.code == 4

    def test_stderr_with_zero_exit_is_an_error(self, python_client, tmp_path):
        """Test that any stderr output fails the asynchronous path."""
        code = "import sys; sys.stderr.write('warning'); print('ok')"
        with pytest.raises(GitProcessError) as exc_info:
            asyncio.run(python_client.run_async(script(code), cwd=str(tmp_path)))
        assert exc_info.value.code == 0
        assert exc_info.value.stderr == "warning"

    def test_missing_executable(self, tmp_path):
        client = GitClient(executable="definitely-not-a-git-binary")
        with pytest.raises(GitProcessError) as exc_info:
            asyncio.run(client.run_async(["log"], cwd=str(tmp_path)))
        assert exc_info.value.code == COMMAND_NOT_FOUND

    def test_timeout(self, tmp_path):
        client = GitClient(executable=sys.executable, timeout=0.2)
        with pytest.raises(GitProcessError) as exc_info:
            asyncio.run(client.run_async(script("import time; time.sleep(5)"), cwd=str(tmp_path)))
        assert exc_info.value.code == TIMED_OUT

    def test_cancel_kills_process(self, python_client, tmp_path):
        """Test that cancelling the call does not leave the child running."""
        spawned = []
        real_exec = asyncio.create_subprocess_exec

        async def recording_exec(*args, **kwargs):
            process = await real_exec(*args, **kwargs)
            spawned.append(process)
            return process

        async def start_then_cancel():
            task = asyncio.create_task(
                python_client.run_async(script("import time; time.sleep(5)"), cwd=str(tmp_path))
            )
            await asyncio.sleep(0.3)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        with patch("commitlog.infra.git_client.asyncio.create_subprocess_exec", recording_exec):
            asyncio.run(start_then_cancel())

        assert len(spawned) == 1
        assert spawned[0].returncode is not None

    def test_command_line(self):
        """Test that git is spawned with the arguments as separate argv entries."""
        process = MagicMock()
        process.returncode = 0

        async def communicate():
            return b"out", b""

        process.communicate = communicate

        async def fake_exec(*args, **kwargs):
            fake_exec.args = args
            fake_exec.kwargs = kwargs
            return process

        with patch("commitlog.infra.git_client.asyncio.create_subprocess_exec", fake_exec):
            output = asyncio.run(GitClient().run_async(["log", "HEAD"], cwd="/repo"))

        assert output == "out"
        assert fake_exec.args == ("git", "log", "HEAD")
        assert fake_exec.kwargs["cwd"] == "/repo"
