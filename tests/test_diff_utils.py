"""Tests for the difflib-backed line diff adapter."""

from mergealign.core import check_diff_order
from mergealign.schema import CharRange, LineRange
from mergealign.utils.diff_utils import compute_inner_changes, compute_line_diff


def test_identical_texts():
    """No entries for identical inputs."""
    assert compute_line_diff(["a", "b"], ["a", "b"]) == []


def test_insertion_entry():
    """Inserted line after base line 2 is an empty base range at 3."""
    entries = compute_line_diff(["a", "b", "c"], ["a", "b", "x", "c"])

    assert len(entries) == 1
    e = entries[0]
    assert e.original == LineRange(start_line=3, end_line=3)
    assert e.modified == LineRange(start_line=3, end_line=4)
    assert len(e.inner_changes) == 1
    assert e.inner_changes[0].original == CharRange(
        start_line=3, start_col=1, end_line=3, end_col=1
    )
    assert e.inner_changes[0].modified == CharRange(
        start_line=3, start_col=1, end_line=4, end_col=1
    )


def test_deletion_entry():
    """Deleted base line 2 maps to an empty variant range."""
    entries = compute_line_diff(["a", "b", "c"], ["a", "c"])

    assert len(entries) == 1
    assert entries[0].original == LineRange(start_line=2, end_line=3)
    assert entries[0].modified == LineRange(start_line=2, end_line=2)


def test_replacement_has_char_level_changes():
    """A changed line gets inner changes past the common prefix."""
    entries = compute_line_diff(["hello world"], ["hello there"])

    assert len(entries) == 1
    inner = entries[0].inner_changes
    assert inner
    assert inner[0].original.start_line == 1
    assert inner[0].original.start_col >= 7


def test_char_level_disabled():
    """char_level=False leaves inner changes empty."""
    entries = compute_line_diff(["hello world"], ["hello there"], char_level=False)
    assert entries[0].inner_changes == []


def test_ignore_trim_whitespace():
    """Indentation-only changes vanish when trimming is on."""
    base = ["  a", "b"]
    modified = ["a", "b"]
    assert compute_line_diff(base, modified, ignore_trim_whitespace=True) == []
    assert len(compute_line_diff(base, modified)) == 1


def test_inner_change_positions_across_lines():
    """Offsets in a multi-line block map to (line, column) pairs."""
    inner = compute_inner_changes(["ab", "cd"], ["ab", "cX"], 5, 5)

    assert len(inner) == 1
    assert inner[0].original == CharRange(start_line=6, start_col=2, end_line=6, end_col=3)
    assert inner[0].modified == CharRange(start_line=6, start_col=2, end_line=6, end_col=3)


def test_entries_satisfy_order_precondition():
    """Adapter output is sorted and non-overlapping."""
    base = ["a", "b", "c", "d", "e", "f"]
    modified = ["a", "x", "c", "e", "f", "g"]
    check_diff_order(compute_line_diff(base, modified))
