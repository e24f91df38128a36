"""
Attribute registry for commitlog.

Every commit attribute commitlog can extract is a member of the
Attribute enum. ATTRIBUTE_SOURCES maps each member to the git
pretty-format tokens it needs and the builder that turns the raw token
strings into a typed value. The format string sent to git and the
parser reading git's answer both walk this one table, so the order in
which tokens are requested is the order in which fields are consumed.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Dict, Optional, Tuple, Any, Union
import re

from .commit import Person

TAG_PREFIX = 'tag: '
DECORATION_SEPARATOR = ', '
SIGNER_PATTERN = re.compile(r'^(.*?) <(.*?)>')


class Attribute(Enum):
    """A commit attribute that can be requested from git log."""
    FULL_HASH = "full_hash"
    PARTIAL_HASH = "partial_hash"
    AUTHOR = "author"
    AUTHOR_TIME = "author_time"
    COMMITTER = "committer"
    COMMIT_TIME = "commit_time"
    SUBJECT = "subject"
    BODY = "body"
    TAGS = "tags"
    REFS = "refs"
    FULL_BODY = "full_body"
    TREE_HASH = "tree_hash"
    PARTIAL_TREE_HASH = "partial_tree_hash"
    PARENT_HASHES = "parent_hashes"
    PARTIAL_PARENT_HASHES = "partial_parent_hashes"
    GPG_KEY = "gpg_key"
    GPG_SIGNER = "gpg_signer"
    GPG_STATUS = "gpg_status"

    @property
    def camel_name(self) -> str:
        """The camelCase spelling, e.g. ``fullHash``."""
        head, *rest = self.value.split('_')
        return head + ''.join(part.capitalize() for part in rest)

    @property
    def is_default(self) -> bool:
        return self in DEFAULT_ATTRIBUTES

    @classmethod
    def parse(cls, name: Union[str, 'Attribute']) -> 'Attribute':
        """
        Look up an attribute by name.

        Accepts enum members, snake_case values (``parent_hashes``) and
        camelCase names (``parentHashes``).

        Raises:
            ValueError: If the name matches no attribute
        """
        if isinstance(name, cls):
            return name
        key = str(name).strip()
        for attribute in cls:
            if key in (attribute.value, attribute.camel_name):
                return attribute
        valid = ', '.join(attribute.value for attribute in cls)
        raise ValueError(f"Unknown commit attribute '{name}'. Valid attributes: {valid}")


def build_person(name: str, email: str) -> Person:
    return Person(name=name, email=email)


def build_date(epoch: str) -> datetime:
    """Unix seconds to a timezone-aware UTC datetime."""
    return datetime.fromtimestamp(int(epoch), tz=timezone.utc)


def build_parents(raw: str) -> Tuple[str, ...]:
    # A root commit has no parents: ''.split(' ') gives [''], so ('',).
    return tuple(raw.split(' '))


def build_tags(raw: str) -> Tuple[str, ...]:
    return tuple(
        ref[len(TAG_PREFIX):]
        for ref in raw.split(DECORATION_SEPARATOR)
        if ref.startswith(TAG_PREFIX)
    )


def build_refs(raw: str) -> Tuple[str, ...]:
    return tuple(ref for ref in raw.split(DECORATION_SEPARATOR) if not ref.startswith(TAG_PREFIX))


def build_signer(raw: str) -> Optional[Person]:
    match = SIGNER_PATTERN.match(raw)
    if match is None:
        return None
    return Person(name=match.group(1), email=match.group(2))


@dataclass(frozen=True)
class AttributeSource:
    """
    Where an attribute comes from.

    Attributes:
        tokens: git pretty-format placeholders, one raw field each
        builder: Turns the raw fields into the typed value. None means
            the single raw field is used as is.
    """
    tokens: Tuple[str, ...]
    builder: Optional[Callable[..., Any]] = None

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    def build(self, *fields: str) -> Any:
        if self.builder is None:
            return fields[0]
        return self.builder(*fields)


ATTRIBUTE_SOURCES: Dict[Attribute, AttributeSource] = {
    Attribute.FULL_HASH: AttributeSource(('%H',)),
    Attribute.PARTIAL_HASH: AttributeSource(('%h',)),
    Attribute.AUTHOR: AttributeSource(('%an', '%ae'), build_person),
    Attribute.AUTHOR_TIME: AttributeSource(('%at',), build_date),
    Attribute.COMMITTER: AttributeSource(('%cn', '%ce'), build_person),
    Attribute.COMMIT_TIME: AttributeSource(('%ct',), build_date),
    Attribute.SUBJECT: AttributeSource(('%s',)),
    Attribute.BODY: AttributeSource(('%b',)),
    Attribute.TAGS: AttributeSource(('%D',), build_tags),
    Attribute.REFS: AttributeSource(('%D',), build_refs),
    Attribute.FULL_BODY: AttributeSource(('%B',)),
    Attribute.TREE_HASH: AttributeSource(('%T',)),
    Attribute.PARTIAL_TREE_HASH: AttributeSource(('%t',)),
    Attribute.PARENT_HASHES: AttributeSource(('%P',), build_parents),
    Attribute.PARTIAL_PARENT_HASHES: AttributeSource(('%p',), build_parents),
    Attribute.GPG_KEY: AttributeSource(('%GK',)),
    Attribute.GPG_SIGNER: AttributeSource(('%GS',), build_signer),
    Attribute.GPG_STATUS: AttributeSource(('%G?',)),
}

DEFAULT_ATTRIBUTES: Tuple[Attribute, ...] = (
    Attribute.FULL_HASH,
    Attribute.PARTIAL_HASH,
    Attribute.AUTHOR,
    Attribute.AUTHOR_TIME,
    Attribute.COMMITTER,
    Attribute.COMMIT_TIME,
    Attribute.SUBJECT,
    Attribute.BODY,
    Attribute.TAGS,
)

OPTIONAL_ATTRIBUTES: Tuple[Attribute, ...] = tuple(
    attribute for attribute in Attribute if attribute not in DEFAULT_ATTRIBUTES
)
