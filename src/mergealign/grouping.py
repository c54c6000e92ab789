# src/mergealign/grouping.py
"""
Group the two sides' line diffs into regions over the base.

Entries from either side whose base ranges touch or overlap end up in the same
group; each side's output range is then stretched so it spans the whole group.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .schema import InnerChange, LineDiffEntry, LineRange, MappingAlignment

logger = logging.getLogger(__name__)


def _extend_output_range(
    entries: Sequence[LineDiffEntry],
    base_range: LineRange,
    delta: int,
) -> LineRange:
    """Output span covering `base_range` on one side."""
    if not entries:
        return base_range.delta(delta)

    first, last = entries[0], entries[-1]
    start_delta = base_range.start_line - first.original.start_line
    end_delta = base_range.end_line - last.original.end_line
    return LineRange(
        start_line=first.modified.start_line + start_delta,
        end_line=last.modified.end_line + end_delta,
    )


def _collect_inner(entries: Sequence[LineDiffEntry]) -> List[InnerChange]:
    return [inner for entry in entries for inner in entry.inner_changes]


def compute_mapping_alignments(
    changes1: Optional[Sequence[LineDiffEntry]],
    changes2: Optional[Sequence[LineDiffEntry]],
) -> List[MappingAlignment]:
    """Merge base->input1 and base->input2 diffs into grouped regions."""
    combined = [(1, c) for c in changes1 or []] + [(2, c) for c in changes2 or []]
    combined.sort(key=lambda item: (item[1].original.start_line, item[0]))

    buckets: Dict[int, List[LineDiffEntry]] = {1: [], 2: []}
    delta_from_base: Dict[int, int] = {1: 0, 2: 0}
    alignments: List[MappingAlignment] = []
    current: Optional[LineRange] = None

    def flush() -> None:
        if current is None:
            return
        alignments.append(
            MappingAlignment(
                base_range=current,
                output1_range=_extend_output_range(
                    buckets[1], current, delta_from_base[1]
                ),
                output2_range=_extend_output_range(
                    buckets[2], current, delta_from_base[2]
                ),
                inner1=_collect_inner(buckets[1]),
                inner2=_collect_inner(buckets[2]),
                changes1=list(buckets[1]),
                changes2=list(buckets[2]),
            ),
        )
        buckets[1] = []
        buckets[2] = []

    for side, change in combined:
        if current is not None and change.original.start_line <= current.end_line:
            current = LineRange(
                start_line=current.start_line,
                end_line=max(current.end_line, change.original.end_line),
            )
        else:
            flush()
            current = change.original

        delta_from_base[side] = change.modified.end_line - change.original.end_line
        buckets[side].append(change)

    flush()

    logger.debug(
        "%d + %d diff entries -> %d groups",
        len(changes1 or []),
        len(changes2 or []),
        len(alignments),
    )
    return alignments


def cover_base_text(
    alignments: Sequence[MappingAlignment],
    base_line_count: int,
) -> List[MappingAlignment]:
    """
    Interleave unchanged regions between the change groups.

    The returned base ranges are sorted and cover [1, base_line_count + 1)
    exactly once. Unchanged regions keep each side's running line delta.
    """
    regions: List[MappingAlignment] = []
    next_line = 1
    delta1 = delta2 = 0

    def gap(start: int, end: int) -> None:
        if end <= start:
            return
        base = LineRange(start_line=start, end_line=end)
        regions.append(
            MappingAlignment(
                base_range=base,
                output1_range=base.delta(delta1),
                output2_range=base.delta(delta2),
            ),
        )

    for ma in alignments:
        gap(next_line, ma.base_range.start_line)
        regions.append(ma)
        next_line = max(next_line, ma.base_range.end_line)
        delta1 = ma.output1_range.end_line - ma.base_range.end_line
        delta2 = ma.output2_range.end_line - ma.base_range.end_line

    gap(next_line, base_line_count + 1)
    return regions
