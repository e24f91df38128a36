"""
Commit builder for commitlog.

Builds the git log format string for a set of requested attributes and
parses git's delimited output back into Commit objects.

Fields are separated by the ASCII unit separator and records are
terminated by the ASCII record separator. Neither can appear in commit
text, so any subject, body or ref name passes through untouched.
"""

from typing import Iterable, Iterator, List, Tuple, Dict, Any
import logging

from ..domain.attribute import Attribute, ATTRIBUTE_SOURCES, DEFAULT_ATTRIBUTES
from ..domain.commit import Commit

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = '\x1e'
UNIT_SEPARATOR = '\x1f'


class CommitBuilder:
    """
    Format string construction and parsing for one set of attributes.

    The default attributes always come first, in their fixed order,
    followed by each requested optional attribute once, in the order
    it was requested.

    Example:
        builder = CommitBuilder([Attribute.PARENT_HASHES])
        output = git_client.run(["log", "HEAD", f"--format={builder.format_string}"], cwd=path)
        commits = builder.build_all(output)
    """

    def __init__(self, optional_attributes: Iterable[Attribute] = ()):
        """
        Initialize CommitBuilder.

        Args:
            optional_attributes: Attributes to request on top of the defaults
        """
        keys: List[Attribute] = list(DEFAULT_ATTRIBUTES)
        for attribute in optional_attributes:
            if attribute not in keys:
                keys.append(attribute)
        self.keys: Tuple[Attribute, ...] = tuple(keys)
        self.tokens: Tuple[str, ...] = tuple(self._placeholder_tokens())
        self.format_string = f"{UNIT_SEPARATOR}{UNIT_SEPARATOR.join(self.tokens)}{RECORD_SEPARATOR}"

    def _placeholder_tokens(self) -> Iterator[str]:
        for key in self.keys:
            yield from ATTRIBUTE_SOURCES[key].tokens

    @property
    def token_count(self) -> int:
        return len(self.tokens)

    def build_all(self, raw_data: str) -> List[Commit]:
        """
        Parse the output of git log into commits.

        Every record ends with a record separator, so the last piece of
        the split is whatever follows the final record and is dropped.

        Args:
            raw_data: stdout of git log run with format_string

        Returns:
            One Commit per record, in git's order
        """
        records = raw_data.split(RECORD_SEPARATOR)[:-1]
        commits = [self.build_commit(record) for record in records]
        logger.debug(f"Parsed {len(commits)} commits ({self.token_count} fields each)")
        return commits

    def build_commit(self, raw_record: str) -> Commit:
        """
        Parse a single record.

        The text before the first unit separator is dropped: it is empty
        for the first record and holds git's line terminator for the rest.

        Raises:
            ValueError: If the record does not hold exactly one field per token
        """
        fields = raw_record.split(UNIT_SEPARATOR)[1:]
        if len(fields) != self.token_count:
            raise ValueError(
                f"Malformed git log record: expected {self.token_count} fields, got {len(fields)}"
            )

        values: Dict[str, Any] = {}
        position = 0
        for key in self.keys:
            source = ATTRIBUTE_SOURCES[key]
            args = fields[position:position + source.token_count]
            position += source.token_count
            values[key.value] = source.build(*args)

        return Commit(attributes=self.keys, **values)
