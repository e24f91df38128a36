"""
Service layer for commitlog.

Contains the parsing logic and the orchestration around it:
- CommitBuilder: Format string construction and record parsing
- parse_diff: Name-status output to GitDiff
- LogService: Log listing with optional per-commit diffs

Services are the primary API for commands to use.
They handle coordination between infrastructure and domain layers.
"""

from .commit_builder import CommitBuilder, RECORD_SEPARATOR, UNIT_SEPARATOR
from .diff_parser import parse_diff, diff_args
from .log_service import LogService, LogRequest, get_range_string, log_args

__all__ = [
    'CommitBuilder',
    'RECORD_SEPARATOR',
    'UNIT_SEPARATOR',
    'parse_diff',
    'diff_args',
    'LogService',
    'LogRequest',
    'get_range_string',
    'log_args',
]
