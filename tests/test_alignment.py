"""Tests for equal ranges, the common-span sweep and alignment selection."""

from mergealign.alignment import (
    get_alignments,
    split_up_common_equal_ranges,
    to_equal_range_mappings,
)
from mergealign.schema import (
    AlignmentPoint,
    CharRange,
    EqualRangeMapping,
    InnerChange,
    LineRange,
    Position,
    TextLength,
)


def pos(line, column=1):
    return Position(line=line, column=column)


def inner(o, m):
    """Build an inner change from ((l, c), (l, c)) pairs."""
    (osl, osc), (oel, oec) = o
    (msl, msc), (mel, mec) = m
    return InnerChange(
        original=CharRange(start_line=osl, start_col=osc, end_line=oel, end_col=oec),
        modified=CharRange(start_line=msl, start_col=msc, end_line=mel, end_col=mec),
    )


def mapping(i_start, i_end, o_start, o_end):
    return EqualRangeMapping(
        input_start=i_start,
        input_end=i_end,
        output_start=o_start,
        output_end=o_end,
    )


def point(a, b, c):
    return AlignmentPoint(input1_line=a, base_line=b, input2_line=c)


# ----------------------------
# Equal range extraction
# ----------------------------


def test_equal_ranges_without_inner_changes_cover_whole_range():
    """No edits: one equal range spanning the group."""
    result = to_equal_range_mappings([], 2, 4, 2, 6)
    assert result == [mapping(pos(2), pos(4), pos(2), pos(6))]


def test_equal_ranges_empty_base_range():
    """A pure insertion has nothing equal on the base side."""
    assert to_equal_range_mappings([], 3, 3, 3, 4) == []


def test_equal_ranges_around_inner_change():
    """Gaps before and after an edit are both emitted."""
    change = inner(((2, 5), (2, 10)), ((2, 5), (2, 15)))
    result = to_equal_range_mappings([change], 2, 3, 2, 3)
    assert result == [
        mapping(pos(2), pos(2, 5), pos(2), pos(2, 5)),
        mapping(pos(2, 10), pos(3), pos(2, 15), pos(3)),
    ]


def test_equal_ranges_drop_zero_length_gap():
    """An edit starting at column 1 leaves no leading equal range."""
    change = inner(((2, 1), (2, 4)), ((2, 1), (2, 2)))
    result = to_equal_range_mappings([change], 2, 3, 2, 3)
    assert result == [mapping(pos(2, 4), pos(3), pos(2, 2), pos(3))]


# ----------------------------
# Common equal range sweep
# ----------------------------


def test_adjacent_ranges_on_one_side_stay_continuous():
    """End-before-start at the same position keeps both spans."""
    ranges1 = [
        mapping(pos(1), pos(3), pos(1), pos(3)),
        mapping(pos(3), pos(5), pos(4), pos(6)),
    ]
    spans = split_up_common_equal_ranges(ranges1, [])

    assert len(spans) == 2
    assert spans[0].input_pos == pos(1)
    assert spans[0].length == TextLength(lines=2, columns=0)
    assert spans[0].output1_pos == pos(1)
    assert spans[1].input_pos == pos(3)
    assert spans[1].output1_pos == pos(4)
    assert spans[1].output2_pos is None


def test_overlapping_ranges_report_both_sides():
    """Where both sides are open the span carries both output positions."""
    ranges1 = [mapping(pos(1), pos(5), pos(1), pos(5))]
    ranges2 = [mapping(pos(3), pos(5), pos(10), pos(12))]
    spans = split_up_common_equal_ranges(ranges1, ranges2)

    assert len(spans) == 2
    assert spans[0].output1_pos == pos(1)
    assert spans[0].output2_pos is None
    assert spans[1].input_pos == pos(3)
    assert spans[1].output1_pos == pos(3)
    assert spans[1].output2_pos == pos(10)


def test_sweep_with_no_ranges():
    """Nothing open, nothing emitted."""
    assert split_up_common_equal_ranges([], []) == []


# ----------------------------
# Alignment selection
# ----------------------------


def test_alignments_for_unequal_growth():
    """Start, one full sync at the common prefix, and the end point."""
    result = get_alignments(
        LineRange(start_line=2, end_line=4),
        LineRange(start_line=2, end_line=6),
        LineRange(start_line=2, end_line=5),
        [],
        [],
    )
    assert result == [point(1, 1, 1), point(2, 2, 2), point(6, 4, 5)]


def test_full_sync_replaces_colliding_half_sync():
    """A half sync sharing the base line is dropped for the full sync."""
    result = get_alignments(
        LineRange(start_line=1, end_line=3),
        LineRange(start_line=1, end_line=3),
        LineRange(start_line=1, end_line=3),
        [inner(((1, 1), (1, 3)), ((1, 1), (1, 5)))],
        [],
    )
    assert result == [point(0, 0, 0), point(1, 1, 1), point(3, 3, 3)]


def test_half_sync_kept_when_free():
    """A deleted line on one side yields a half sync that survives."""
    result = get_alignments(
        LineRange(start_line=1, end_line=5),
        LineRange(start_line=1, end_line=4),
        LineRange(start_line=1, end_line=5),
        [inner(((2, 1), (3, 1)), ((2, 1), (2, 1)))],
        [],
    )
    assert result == [
        point(0, 0, 0),
        point(1, 1, 1),
        AlignmentPoint(base_line=2, input2_line=2),
        point(2, 3, 3),
        point(4, 5, 5),
    ]


def test_rejected_long_span_falls_back_one_line():
    """A colliding full sync over more than one line moves one line down."""
    result = get_alignments(
        LineRange(start_line=1, end_line=3),
        LineRange(start_line=1, end_line=4),
        LineRange(start_line=1, end_line=3),
        [inner(((1, 3), (1, 3)), ((1, 3), (2, 1)))],
        [],
    )
    assert result == [point(0, 0, 0), point(1, 1, 1), point(3, 2, 2), point(4, 3, 3)]


def test_alignment_lines_unique_per_axis():
    """No line number repeats on any axis."""
    result = get_alignments(
        LineRange(start_line=1, end_line=5),
        LineRange(start_line=1, end_line=4),
        LineRange(start_line=1, end_line=5),
        [inner(((2, 1), (3, 1)), ((2, 1), (2, 1)))],
        [],
    )
    for axis in ("input1_line", "base_line", "input2_line"):
        values = [getattr(p, axis) for p in result if getattr(p, axis) is not None]
        assert len(values) == len(set(values))


def test_end_point_not_duplicated():
    """Identical ranges produce start and end only once each."""
    same = LineRange(start_line=4, end_line=4)
    result = get_alignments(same, same, same, [], [])
    assert result == [point(3, 3, 3), point(4, 4, 4)]
