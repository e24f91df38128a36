"""Tests for name-status diff parsing."""

from commitlog.domain import GitDiff
from commitlog.services.diff_parser import parse_diff, diff_args


class TestParseDiff:
    """Tests for parse_diff."""

    def test_classifies_statuses(self):
        """Test A/D/M classification; renames only count as touched."""
        raw = "A\tnew-file\nD\tdeleted-file\nM\tmodified-file\nR100\trenamed-file\n"
        diff = parse_diff(raw)

        assert diff.added == {"new-file"}
        assert diff.deleted == {"deleted-file"}
        assert diff.modified == {"modified-file"}
        assert diff.touched == {"new-file", "deleted-file", "modified-file", "renamed-file"}

    def test_empty_output(self):
        """Test a commit with no changes (e.g. a root commit in diff-tree)."""
        assert parse_diff("") == GitDiff()

    def test_copy_and_type_change_only_touched(self):
        """Test that statuses other than A, D and M are not classified."""
        diff = parse_diff("C075\tcopied.py\nT\tlink\nU\tconflicted\n")
        assert diff.added == set()
        assert diff.deleted == set()
        assert diff.modified == set()
        assert diff.touched == {"copied.py", "link", "conflicted"}

    def test_rename_with_both_paths(self):
        """Test that a rename line with source and destination records the source."""
        diff = parse_diff("R087\told/name.py\tnew/name.py\n")
        assert diff.touched == {"old/name.py"}
        assert diff.modified == set()

    def test_paths_with_spaces(self):
        """Test that paths are kept verbatim."""
        diff = parse_diff("M\tdocs/read me.md\n")
        assert diff.modified == {"docs/read me.md"}

    def test_nested_paths(self):
        """Test recursive output with directories."""
        raw = "A\tsrc/pkg/__init__.py\nA\tsrc/pkg/core.py\nM\tREADME.md\n"
        diff = parse_diff(raw)
        assert diff.added == {"src/pkg/__init__.py", "src/pkg/core.py"}
        assert diff.modified == {"README.md"}
        assert len(diff.touched) == 3

    def test_to_dict_sorted(self):
        """Test serialization as sorted lists."""
        diff = parse_diff("M\tb.txt\nM\ta.txt\n")
        assert diff.to_dict() == {
            'added': [],
            'deleted': [],
            'modified': ['a.txt', 'b.txt'],
            'touched': ['a.txt', 'b.txt'],
        }


class TestDiffArgs:
    """Tests for the diff-tree invocation."""

    def test_diff_args(self):
        assert diff_args("abc123") == [
            'diff-tree', '--no-commit-id', '--name-status', '-r', 'abc123'
        ]
