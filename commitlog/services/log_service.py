"""
Log service for commitlog.

Orchestrates a git log listing: resolves the reference range, asks git
for exactly the requested attributes, parses the records and, when
requested, fetches and attaches each commit's diff.

Diffs are fetched one at a time, in log order, by log_sync() and all at
once by log(). Either way the first failing git invocation aborts the
whole listing.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Any, Iterable, List, Optional, Tuple, Union

from ..config import load_config
from ..domain.attribute import Attribute
from ..domain.commit import Commit
from ..infra.git_client import GitClient
from .commit_builder import CommitBuilder
from .diff_parser import diff_args, parse_diff

logger = logging.getLogger(__name__)

DEFAULT_END_REF = 'HEAD'
DIFF = 'diff'


def get_range_string(
    start_ref: Optional[str] = None,
    end_ref: Optional[str] = None,
    default_end_ref: str = DEFAULT_END_REF
) -> str:
    """
    Build the revision range for git log.

    Args:
        start_ref: Exclusive start of the range. If None, every ancestor
            of end_ref is listed.
        end_ref: Inclusive end of the range (default: default_end_ref)
        default_end_ref: Reference used when end_ref is None

    Returns:
        "start..end" or just "end"
    """
    end_ref = end_ref if end_ref is not None else default_end_ref
    if start_ref is not None:
        return f"{start_ref}..{end_ref}"
    return end_ref


def log_args(range_string: str, format_string: str) -> List[str]:
    return ['log', range_string, f'--format={format_string}']


@dataclass(frozen=True)
class LogRequest:
    """
    What to extract for each commit.

    Attributes:
        attributes: Optional attributes on top of the defaults, in request order
        include_diff: Whether to fetch the paths each commit touched
    """
    attributes: Tuple[Attribute, ...] = ()
    include_diff: bool = False

    @classmethod
    def build(
        cls,
        include: Iterable[Union[str, Attribute]] = (),
        include_diff: bool = False
    ) -> 'LogRequest':
        """
        Normalize a mixed list of attribute names and members.

        The pseudo-attribute "diff" may appear in include; it switches
        include_diff on instead of naming a log attribute.

        Raises:
            ValueError: If a name matches no attribute
        """
        attributes: List[Attribute] = []
        for name in include:
            if isinstance(name, str) and name.strip() == DIFF:
                include_diff = True
                continue
            attribute = Attribute.parse(name)
            if attribute not in attributes:
                attributes.append(attribute)
        return cls(attributes=tuple(attributes), include_diff=include_diff)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> 'LogRequest':
        """Build a request from command-line style names, "diff" included."""
        return cls.build(include=names)


class LogService:
    """
    Service for reading commit history.

    Example:
        service = LogService()
        request = LogRequest.build(include=["parent_hashes"], include_diff=True)

        for commit in service.log_sync("/path/to/repo", request=request):
            print(commit.partial_hash, sorted(commit.diff.touched))
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        git_client: Optional[GitClient] = None
    ):
        """
        Initialize LogService.

        Args:
            config: Configuration dict (loads default if None)
            git_client: GitClient instance (creates one from config if None)
        """
        self.config = config if config is not None else load_config()
        git_config = self.config.get('git', {})
        log_config = self.config.get('log', {})

        self.git = git_client or GitClient(
            executable=git_config.get('executable', 'git'),
            timeout=git_config.get('timeout_seconds') or None
        )
        self.default_end_ref = log_config.get('default_end_ref', DEFAULT_END_REF)
        self.max_concurrent_diffs = git_config.get('max_concurrent_diffs') or None

    def _prepare(
        self,
        start_ref: Optional[str],
        end_ref: Optional[str],
        request: LogRequest
    ) -> Tuple[CommitBuilder, List[str]]:
        builder = CommitBuilder(request.attributes)
        range_string = get_range_string(start_ref, end_ref, self.default_end_ref)
        logger.debug(
            f"Listing {range_string} with {builder.token_count} fields per commit"
            f"{' and diffs' if request.include_diff else ''}"
        )
        return builder, log_args(range_string, builder.format_string)

    def log_sync(
        self,
        directory: str,
        start_ref: Optional[str] = None,
        end_ref: Optional[str] = None,
        request: Optional[LogRequest] = None
    ) -> List[Commit]:
        """
        List commits synchronously.

        Args:
            directory: Path to a git repository
            start_ref: Exclusive start of the range
            end_ref: Inclusive end of the range
            request: Attributes and diff flag (defaults only if None)

        Returns:
            Commits in git log order

        Raises:
            GitProcessError: If the listing or any diff fails
        """
        request = request or LogRequest()
        builder, args = self._prepare(start_ref, end_ref, request)
        commits = builder.build_all(self.git.run(args, cwd=directory))

        if not request.include_diff:
            return commits

        with_diffs = []
        for index, commit in enumerate(commits, 1):
            logger.debug(f"Fetching diff {index}/{len(commits)} for {commit.partial_hash}")
            raw_diff = self.git.run(diff_args(commit.full_hash), cwd=directory)
            with_diffs.append(commit.with_diff(parse_diff(raw_diff)))
        return with_diffs

    async def log(
        self,
        directory: str,
        start_ref: Optional[str] = None,
        end_ref: Optional[str] = None,
        request: Optional[LogRequest] = None
    ) -> List[Commit]:
        """
        List commits with asyncio subprocesses.

        Diffs for all commits are fetched concurrently, bounded by
        max_concurrent_diffs when it is set. When one diff fails, the
        others are cancelled before the error reaches the caller.

        Args:
            directory: Path to a git repository
            start_ref: Exclusive start of the range
            end_ref: Inclusive end of the range
            request: Attributes and diff flag (defaults only if None)

        Returns:
            Commits in git log order

        Raises:
            GitProcessError: If the listing or any diff fails
        """
        request = request or LogRequest()
        builder, args = self._prepare(start_ref, end_ref, request)
        commits = builder.build_all(await self.git.run_async(args, cwd=directory))

        if not request.include_diff:
            return commits

        semaphore = asyncio.Semaphore(self.max_concurrent_diffs) if self.max_concurrent_diffs else None

        async def apply_diff(commit: Commit) -> Commit:
            if semaphore is None:
                raw_diff = await self.git.run_async(diff_args(commit.full_hash), cwd=directory)
            else:
                async with semaphore:
                    raw_diff = await self.git.run_async(diff_args(commit.full_hash), cwd=directory)
            return commit.with_diff(parse_diff(raw_diff))

        logger.debug(f"Fetching {len(commits)} diffs concurrently")
        tasks = [asyncio.create_task(apply_diff(commit)) for commit in commits]
        try:
            return list(await asyncio.gather(*tasks))
        except BaseException:
            # gather() leaves the other diffs running; stop them before re-raising
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
