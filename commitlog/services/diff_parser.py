"""
Diff parsing for commitlog.

Turns the name-status output of ``git diff-tree`` for one commit into a
GitDiff.
"""

from typing import List, Set

from ..domain.commit import GitDiff

ADDED = 'A'
DELETED = 'D'
MODIFIED = 'M'


def diff_args(full_hash: str) -> List[str]:
    """Arguments for listing the paths a commit touched."""
    return [
        'diff-tree',
        '--no-commit-id',
        '--name-status',
        '-r',
        full_hash,
    ]


def parse_diff(raw_data: str) -> GitDiff:
    """
    Classify each line of name-status output.

    Each line is ``<status>\\t<path>``. Only the exact statuses A, D and M
    are sorted into added, deleted and modified. Renames and copies
    (R100, C075, ...) only count as touched.

    Args:
        raw_data: stdout of git diff-tree --name-status

    Returns:
        GitDiff for the commit
    """
    added: Set[str] = set()
    deleted: Set[str] = set()
    modified: Set[str] = set()
    touched: Set[str] = set()

    for line in raw_data.split('\n')[:-1]:
        status, path = line.split('\t')[:2]
        touched.add(path)
        if status == ADDED:
            added.add(path)
        elif status == DELETED:
            deleted.add(path)
        elif status == MODIFIED:
            modified.add(path)

    return GitDiff(
        added=frozenset(added),
        deleted=frozenset(deleted),
        modified=frozenset(modified),
        touched=frozenset(touched),
    )
