"""
commitlog - Structured commit metadata from git history.

commitlog runs git log with a format string that asks for exactly the
attributes you want, and parses the answer into typed Commit records.

Quick Start:
    import commitlog

    # Every commit reachable from HEAD in the current directory
    for commit in commitlog.git_log_sync():
        print(commit.partial_hash, commit.author.name, commit.subject)

    # A range, with extra attributes and the files each commit touched
    commits = commitlog.git_log_sync(
        "/path/to/repo",
        start_ref="v1.0",
        end_ref="main",
        include=["parent_hashes", "refs", "gpg_signer"],
        include_diff=True,
    )

    # The same from asyncio code; diffs are fetched concurrently
    commits = await commitlog.git_log("/path/to/repo", include_diff=True)

Domain Objects:
    Commit - Metadata of a single commit
    Person - Author, committer or GPG signer
    GitDiff - Paths added, deleted, modified and touched by a commit
    Attribute - Every attribute that can be requested

Default attributes (always present):
    full_hash, partial_hash, author, author_time, committer,
    commit_time, subject, body, tags

Optional attributes:
    refs, full_body, tree_hash, partial_tree_hash, parent_hashes,
    partial_parent_hashes, gpg_key, gpg_signer, gpg_status
"""

__version__ = "0.1.0"

# High-level API
from .api import git_log, git_log_sync

# Domain objects
from .domain import (
    Commit,
    Person,
    GitDiff,
    Attribute,
    DEFAULT_ATTRIBUTES,
    OPTIONAL_ATTRIBUTES,
)

# Parsing and orchestration (for advanced use)
from .services import (
    CommitBuilder,
    LogService,
    LogRequest,
    parse_diff,
)

# Infrastructure
from .infra import GitClient, GitProcessError

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # High-level API
    "git_log",
    "git_log_sync",
    # Domain objects
    "Commit",
    "Person",
    "GitDiff",
    "Attribute",
    "DEFAULT_ATTRIBUTES",
    "OPTIONAL_ATTRIBUTES",
    # Services
    "CommitBuilder",
    "LogService",
    "LogRequest",
    "parse_diff",
    # Infrastructure
    "GitClient",
    "GitProcessError",
    # Configuration
    "load_config",
    "save_config",
]
