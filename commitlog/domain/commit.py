"""
Commit domain objects for commitlog.

Commit, Person and GitDiff are immutable value records built once from
raw git output. They are serializable for JSONL output.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional, Dict, Any, FrozenSet, Tuple, TYPE_CHECKING
import json

if TYPE_CHECKING:
    from .attribute import Attribute


@dataclass(frozen=True)
class Person:
    """An author, committer or signer: a name and an email address."""
    name: str
    email: str

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'email': self.email}

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True)
class GitDiff:
    """
    Paths touched by a single commit.

    Only the exact status letters A, D and M are classified into
    added, deleted and modified. Every path, whatever its status,
    lands in touched.
    """
    added: FrozenSet[str] = frozenset()
    deleted: FrozenSet[str] = frozenset()
    modified: FrozenSet[str] = frozenset()
    touched: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'added': sorted(self.added),
            'deleted': sorted(self.deleted),
            'modified': sorted(self.modified),
            'touched': sorted(self.touched),
        }


@dataclass(frozen=True)
class Commit:
    """
    Metadata of a single git commit.

    The default attributes are always present. Optional attributes are
    only meaningful when they were requested; which ones were requested
    is recorded in ``attributes``, in request order, so that a requested
    attribute whose value is None (an unsigned commit's gpg_signer) can
    be told apart from one that was never asked for.

    Multi-valued attributes are tuples, so commits are hashable.

    Attributes:
        full_hash: Full commit hash (%H)
        partial_hash: Abbreviated commit hash (%h)
        author: Author name and email
        author_time: Author timestamp (UTC)
        committer: Committer name and email
        commit_time: Committer timestamp (UTC)
        subject: First line of the commit message
        body: Commit message without the subject line
        tags: Tag names decorating the commit
        attributes: Every attribute requested for this record, in request order
        diff: Paths touched by the commit, when diffs were requested
    """

    full_hash: str
    partial_hash: str
    author: Person
    author_time: datetime
    committer: Person
    commit_time: datetime
    subject: str
    body: str
    tags: Tuple[str, ...]
    refs: Optional[Tuple[str, ...]] = None
    full_body: Optional[str] = None
    tree_hash: Optional[str] = None
    partial_tree_hash: Optional[str] = None
    parent_hashes: Optional[Tuple[str, ...]] = None
    partial_parent_hashes: Optional[Tuple[str, ...]] = None
    gpg_key: Optional[str] = None
    gpg_signer: Optional[Person] = None
    gpg_status: Optional[str] = None
    attributes: Tuple['Attribute', ...] = field(default=(), compare=False)
    diff: Optional[GitDiff] = None

    def has(self, attribute: 'Attribute') -> bool:
        """Whether the attribute is part of this record."""
        from .attribute import DEFAULT_ATTRIBUTES

        return attribute in DEFAULT_ATTRIBUTES or attribute in self.attributes

    def get(self, attribute: 'Attribute') -> Any:
        """Value of an attribute by enum member."""
        return getattr(self, attribute.value)

    def with_diff(self, diff: GitDiff) -> 'Commit':
        """Return a copy of this commit with the diff attached."""
        return replace(self, diff=diff)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Keys follow request order: the defaults, then the optional
        attributes as they were asked for. Unrequested optional
        attributes are left out entirely.
        """
        from .attribute import DEFAULT_ATTRIBUTES

        data: Dict[str, Any] = {}
        for attribute in DEFAULT_ATTRIBUTES + tuple(self.attributes):
            if attribute.value in data:
                continue
            data[attribute.value] = _serialize(self.get(attribute))
        if self.diff is not None:
            data['diff'] = self.diff.to_dict()
        return data

    def to_jsonl(self) -> str:
        """Convert to single-line JSON for streaming output."""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    def __str__(self) -> str:
        return f"{self.partial_hash} {self.subject}"


def _serialize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    if isinstance(value, tuple):
        return list(value)
    return value
