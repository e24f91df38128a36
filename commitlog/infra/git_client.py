"""
Git client infrastructure for commitlog.

Provides a clean abstraction over git command execution.
All git invocations go through this client, making them:
- Easy to mock for testing
- Consistent in error handling
- Isolated from parsing logic
"""

import asyncio
import subprocess
from typing import Optional, Sequence, List
import logging

logger = logging.getLogger(__name__)

# Shell conventions for "command not found" and "timed out"
COMMAND_NOT_FOUND = 127
TIMED_OUT = 124


class GitProcessError(Exception):
    """
    A git invocation failed.

    Attributes:
        code: Exit status of the git process (None if it never exited)
        stderr: Whatever git wrote to its error stream
        args_list: Arguments passed to git
    """

    def __init__(self, code: Optional[int], stderr: str = "", args_list: Sequence[str] = ()):
        self.code = code
        self.stderr = stderr
        self.args_list = list(args_list)
        command = ' '.join(['git'] + self.args_list[:1])
        message = f"{command} failed with exit code {code}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)


class GitClient:
    """
    Runs git and hands back its standard output.

    Example:
        client = GitClient()
        output = client.run(["log", "-1", "--format=%H"], cwd="/path/to/repo")
    """

    def __init__(self, executable: str = "git", timeout: Optional[float] = None):
        """
        Initialize GitClient.

        Args:
            executable: git binary to invoke (default: "git")
            timeout: Command timeout in seconds (default: no timeout)
        """
        self.executable = executable
        self.timeout = timeout or None

    def _command(self, args: Sequence[str]) -> List[str]:
        return [self.executable, *args]

    def run(self, args: Sequence[str], cwd: str) -> str:
        """
        Run git synchronously.

        Args:
            args: Arguments after the git executable
            cwd: Working directory

        Returns:
            Raw stdout

        Raises:
            GitProcessError: If git exits non-zero, is missing or times out
        """
        logger.debug(f"Running git {' '.join(args)} in {cwd}")
        try:
            result = subprocess.run(
                self._command(args),
                cwd=cwd,
                capture_output=True,
                timeout=self.timeout
            )
        except FileNotFoundError as e:
            raise GitProcessError(COMMAND_NOT_FOUND, str(e), args) from e
        except subprocess.TimeoutExpired as e:
            logger.warning(f"Git command timed out: git {' '.join(args)}")
            raise GitProcessError(TIMED_OUT, f"timed out after {self.timeout}s", args) from e

        stderr = _decode(result.stderr)
        if result.returncode != 0:
            raise GitProcessError(result.returncode, stderr, args)
        if stderr:
            logger.debug(f"git {args[0]} wrote to stderr: {stderr.strip()}")

        return _decode(result.stdout)

    async def run_async(self, args: Sequence[str], cwd: str) -> str:
        """
        Run git as an asyncio subprocess.

        Unlike run(), anything on the error stream counts as a failure,
        even with a zero exit status. Cancelling the coroutine kills the
        git process.

        Args:
            args: Arguments after the git executable
            cwd: Working directory

        Returns:
            Raw stdout

        Raises:
            GitProcessError: If git exits non-zero, writes to stderr,
                is missing or times out
        """
        logger.debug(f"Running git {' '.join(args)} in {cwd} (async)")
        try:
            process = await asyncio.create_subprocess_exec(
                *self._command(args),
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except FileNotFoundError as e:
            raise GitProcessError(COMMAND_NOT_FOUND, str(e), args) from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            await _kill(process)
            logger.warning(f"Git command timed out: git {' '.join(args)}")
            raise GitProcessError(TIMED_OUT, f"timed out after {self.timeout}s", args) from e
        except asyncio.CancelledError:
            await _kill(process)
            logger.debug(f"Cancelled git {' '.join(args)}")
            raise

        error_output = _decode(stderr)
        if process.returncode != 0 or error_output:
            raise GitProcessError(process.returncode, error_output, args)

        return _decode(stdout)


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        process.kill()
    await process.wait()


def _decode(raw: Optional[bytes]) -> str:
    if not raw:
        return ""
    return raw.decode('utf-8', errors='replace')
