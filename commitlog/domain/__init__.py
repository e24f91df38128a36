"""
Domain layer for commitlog.

Contains pure domain objects with no I/O or side effects:
- Commit: Metadata of a single git commit
- Person: Author, committer or GPG signer
- GitDiff: Paths added, deleted, modified and touched by a commit
- Attribute: The registry of attributes git log can be asked for

These objects are immutable and provide serialization methods for
JSONL output.
"""

from .commit import Commit, Person, GitDiff
from .attribute import (
    Attribute,
    AttributeSource,
    ATTRIBUTE_SOURCES,
    DEFAULT_ATTRIBUTES,
    OPTIONAL_ATTRIBUTES,
)

__all__ = [
    'Commit',
    'Person',
    'GitDiff',
    'Attribute',
    'AttributeSource',
    'ATTRIBUTE_SOURCES',
    'DEFAULT_ATTRIBUTES',
    'OPTIONAL_ATTRIBUTES',
]
