# src/mergealign/alignment.py
"""
Fine-grained line alignment inside one grouped region.

Pipeline per region:
1. inner changes of each side -> equal range mappings (gaps between edits)
2. both sides' equal ranges -> common spans over the base (event sweep)
3. common spans -> ordered synchronization points, full syncs preferred
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from .schema import (
    AlignmentPoint,
    CommonEqualSpan,
    EqualRangeMapping,
    InnerChange,
    LineRange,
    Position,
    TextLength,
)

logger = logging.getLogger(__name__)

_ONE_LINE = TextLength(lines=1, columns=0)


def to_equal_range_mappings(
    inner_changes: Sequence[InnerChange],
    input_start: int,
    input_end: int,
    output_start: int,
    output_end: int,
) -> List[EqualRangeMapping]:
    """Return the unchanged spans between inner edits, bounded by the line range."""
    result: List[EqualRangeMapping] = []

    equal_input_start = Position(line=input_start, column=1)
    equal_output_start = Position(line=output_start, column=1)

    for change in inner_changes or []:
        equal_input_end = change.original.start
        equal_output_end = change.modified.start
        if equal_input_start.is_before(equal_input_end):
            result.append(
                EqualRangeMapping(
                    input_start=equal_input_start,
                    input_end=equal_input_end,
                    output_start=equal_output_start,
                    output_end=equal_output_end,
                ),
            )
        equal_input_start = change.original.end
        equal_output_start = change.modified.end

    equal_input_end = Position(line=input_end, column=1)
    equal_output_end = Position(line=output_end, column=1)
    if equal_input_start.is_before(equal_input_end):
        result.append(
            EqualRangeMapping(
                input_start=equal_input_start,
                input_end=equal_input_end,
                output_start=equal_output_start,
                output_end=equal_output_end,
            ),
        )

    return result


# (base position, kind, side, output position); kind 0 = end, 1 = start
_Event = Tuple[Position, int, int, Position]


def _event_key(event: _Event) -> Tuple[int, int, int]:
    # End events sort before start events at the same base position, so a
    # range ending where another begins keeps coverage continuous.
    pos, kind, _side, _out = event
    return (pos.line, pos.column, kind)


def split_up_common_equal_ranges(
    ranges1: Sequence[EqualRangeMapping],
    ranges2: Sequence[EqualRangeMapping],
) -> List[CommonEqualSpan]:
    """Sweep both sides' equal ranges and report which sides cover each base span."""
    events: List[_Event] = []
    for side, ranges in ((1, ranges1), (2, ranges2)):
        for rm in ranges:
            events.append((rm.input_start, 1, side, rm.output_start))
            events.append((rm.input_end, 0, side, rm.output_end))

    events.sort(key=_event_key)

    result: List[CommonEqualSpan] = []
    starts: Dict[int, Optional[Position]] = {1: None, 2: None}
    last_input_pos: Optional[Position] = None

    for pos, kind, side, output_pos in events:
        open_sides = starts[1] is not None or starts[2] is not None
        if last_input_pos is not None and open_sides:
            length = TextLength.between(last_input_pos, pos)
            if not length.is_zero():
                result.append(
                    CommonEqualSpan(
                        input_pos=last_input_pos,
                        length=length,
                        output1_pos=starts[1],
                        output2_pos=starts[2],
                    ),
                )
                if starts[1] is not None:
                    starts[1] = starts[1].add(length)
                if starts[2] is not None:
                    starts[2] = starts[2].add(length)
        starts[side] = output_pos if kind == 1 else None
        last_input_pos = pos

    return result


def _span_point(span: CommonEqualSpan, offset: int = 0) -> AlignmentPoint:
    return AlignmentPoint(
        input1_line=span.output1_pos.line + offset if span.output1_pos else None,
        base_line=span.input_pos.line + offset,
        input2_line=span.output2_pos.line + offset if span.output2_pos else None,
    )


def get_alignments(
    base_range: LineRange,
    output1_range: LineRange,
    output2_range: LineRange,
    inner1: Sequence[InnerChange],
    inner2: Sequence[InnerChange],
) -> List[AlignmentPoint]:
    """
    Choose synchronization points for one region, start and end included.

    Full three-way syncs win over half syncs: accepting one drops every queued
    point that shares a coordinate with it. Half syncs only go in where no
    coordinate is taken yet.
    """
    equal1 = to_equal_range_mappings(
        inner1,
        base_range.start_line,
        base_range.end_line,
        output1_range.start_line,
        output1_range.end_line,
    )
    equal2 = to_equal_range_mappings(
        inner2,
        base_range.start_line,
        base_range.end_line,
        output2_range.start_line,
        output2_range.end_line,
    )
    common = split_up_common_equal_ranges(equal1, equal2)

    result: List[AlignmentPoint] = [
        AlignmentPoint(
            input1_line=output1_range.start_line - 1,
            base_line=base_range.start_line - 1,
            input2_line=output2_range.start_line - 1,
        ),
    ]

    for span in common:
        candidate = _span_point(span)

        if candidate.is_full_sync:
            should_add = not any(
                p.is_full_sync and p.collides_with(candidate) for p in result
            )
            if should_add:
                result = [p for p in result if not candidate.collides_with(p)]
        else:
            should_add = not any(candidate.collides_with(p) for p in result)

        if should_add:
            result.append(candidate)
        elif span.length.is_greater_than(_ONE_LINE):
            result.append(_span_point(span, offset=1))

    final = AlignmentPoint(
        input1_line=output1_range.end_line,
        base_line=base_range.end_line,
        input2_line=output2_range.end_line,
    )
    result = [p for p in result if p != final]
    result.append(final)

    logger.debug(
        "base %s: %d common spans -> %d alignment points",
        (base_range.start_line, base_range.end_line),
        len(common),
        len(result),
    )
    return result
