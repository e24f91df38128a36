"""Tests for the high-level API."""

import asyncio
import os
import pytest
from unittest.mock import MagicMock

import commitlog
from commitlog.api import git_log, git_log_sync
from commitlog.infra.git_client import GitClient, GitProcessError
from commitlog.services.commit_builder import RECORD_SEPARATOR, UNIT_SEPARATOR

FULL_HASH = "c" * 40


def one_record(*extra_fields) -> str:
    fields = [
        FULL_HASH, "ccccccc", "Jane Doe", "jane@example.com", "1700000000",
        "Jane Doe", "jane@example.com", "1700000000", "Subject", "", "",
        *extra_fields,
    ]
    return UNIT_SEPARATOR + UNIT_SEPARATOR.join(fields) + RECORD_SEPARATOR + "\n"


@pytest.fixture
def mock_git_client():
    return MagicMock(spec=GitClient)


class TestGitLogSync:
    """Tests for git_log_sync."""

    def test_defaults_to_cwd(self, mock_git_client):
        mock_git_client.run.return_value = one_record()

        commits = git_log_sync(git_client=mock_git_client)

        assert len(commits) == 1
        assert mock_git_client.run.call_args.kwargs["cwd"] == os.getcwd()
        assert mock_git_client.run.call_args.args[0][:2] == ["log", "HEAD"]

    def test_diff_in_include(self, mock_git_client):
        """Test that "diff" among the attribute names triggers diff fetching."""
        mock_git_client.run.side_effect = [one_record("abc"), "A\tx.py\n"]

        commits = git_log_sync("/repo", include=["partialParentHashes", "diff"],
                               git_client=mock_git_client)

        assert commits[0].partial_parent_hashes == ("abc",)
        assert commits[0].diff.added == {"x.py"}
        assert mock_git_client.run.call_args.args[0][-1] == FULL_HASH

    def test_error_propagates(self, mock_git_client):
        mock_git_client.run.side_effect = GitProcessError(128, "fatal", ["log"])

        with pytest.raises(GitProcessError) as exc_info:
            git_log_sync("/repo", end_ref="missing", git_client=mock_git_client)

        assert exc_info.value.code == 128

    def test_diff_error_propagates(self, mock_git_client):
        mock_git_client.run.side_effect = [one_record(), GitProcessError(129, "usage", ["diff-tree"])]

        with pytest.raises(GitProcessError) as exc_info:
            git_log_sync("/repo", include_diff=True, git_client=mock_git_client)

        assert exc_info.value.code == 129

    def test_unknown_attribute(self, mock_git_client):
        with pytest.raises(ValueError):
            git_log_sync("/repo", include=["nope"], git_client=mock_git_client)
        mock_git_client.run.assert_not_called()


class TestGitLog:
    """Tests for the asynchronous git_log."""

    def test_returns_commits(self, mock_git_client):
        mock_git_client.run_async.return_value = one_record()

        commits = asyncio.run(git_log("/repo", start_ref="v1", git_client=mock_git_client))

        assert [c.full_hash for c in commits] == [FULL_HASH]
        assert mock_git_client.run_async.call_args.args[0][1] == "v1..HEAD"

    def test_error_propagates(self, mock_git_client):
        mock_git_client.run_async.side_effect = GitProcessError(128, "fatal", ["log"])

        with pytest.raises(GitProcessError) as exc_info:
            asyncio.run(git_log("/repo", git_client=mock_git_client))

        assert exc_info.value.code == 128

    def test_diff_error_propagates(self, mock_git_client):
        async def fake_run_async(args, cwd):
            if args[0] == "log":
                return one_record()
            raise GitProcessError(129, "usage", args)

        mock_git_client.run_async.side_effect = fake_run_async

        with pytest.raises(GitProcessError) as exc_info:
            asyncio.run(git_log("/repo", include_diff=True, git_client=mock_git_client))

        assert exc_info.value.code == 129


class TestPackageExports:
    """Tests for the top-level package."""

    def test_exports(self):
        for name in commitlog.__all__:
            assert hasattr(commitlog, name), name

    def test_version(self):
        assert commitlog.__version__ == "0.1.0"
