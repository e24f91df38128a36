"""
High-level Python API for commitlog.

Two calling conventions over the same log service:

    import commitlog

    # Synchronous: diffs are fetched one commit at a time
    for commit in commitlog.git_log_sync("/path/to/repo", start_ref="v1.0"):
        print(commit.partial_hash, commit.subject)

    # Asynchronous: diffs are fetched concurrently
    commits = await commitlog.git_log(
        "/path/to/repo",
        include=["parent_hashes", "refs"],
        include_diff=True,
    )

Both raise GitProcessError, carrying git's exit code, when git fails.
"""

import os
from typing import Iterable, List, Optional, Union
import logging

from .domain import Attribute, Commit
from .infra import GitClient
from .services import LogService, LogRequest
from .config import get_default_config

logger = logging.getLogger(__name__)

IncludeNames = Iterable[Union[str, Attribute]]


def _service(git_client: Optional[GitClient]) -> LogService:
    return LogService(config=get_default_config(), git_client=git_client or GitClient())


def git_log_sync(
    directory: Optional[str] = None,
    start_ref: Optional[str] = None,
    end_ref: Optional[str] = None,
    include: IncludeNames = (),
    include_diff: bool = False,
    git_client: Optional[GitClient] = None
) -> List[Commit]:
    """
    Synchronously fetch the metadata of all commits within a reference range.

    Args:
        directory: Path to a git repository (default: current directory)
        start_ref: Commit hash, tag or branch marking the beginning of the
            range (exclusive). If None, all ancestors of end_ref are listed.
        end_ref: Reference marking the end of the range (inclusive,
            default: HEAD)
        include: Optional attributes to extract on top of the defaults.
            "diff" may be passed here instead of include_diff.
        include_diff: Also collect the files touched by each commit.
            Off by default: it costs one git invocation per commit.
        git_client: GitClient to run git with

    Returns:
        Commits in git log order
    """
    request = LogRequest.build(include, include_diff)
    return _service(git_client).log_sync(directory or os.getcwd(), start_ref, end_ref, request)


async def git_log(
    directory: Optional[str] = None,
    start_ref: Optional[str] = None,
    end_ref: Optional[str] = None,
    include: IncludeNames = (),
    include_diff: bool = False,
    git_client: Optional[GitClient] = None
) -> List[Commit]:
    """
    Asynchronously fetch the metadata of all commits within a reference range.

    Takes the same arguments as git_log_sync(). When include_diff is set,
    the diffs of all commits are fetched concurrently and the first
    failure aborts the whole call.
    """
    request = LogRequest.build(include, include_diff)
    return await _service(git_client).log(directory or os.getcwd(), start_ref, end_ref, request)
