"""
Core merge-alignment operations.

Turns two line diffs against a common base into filler lines for the two
variant panes and the list of conflicting regions.
"""

from typing import List, Optional, Sequence, Tuple

import logging

from .alignment import get_alignments
from .grouping import compute_mapping_alignments, cover_base_text
from .schema import (
    ConflictBlock,
    Filler,
    LineDiffEntry,
    MappingAlignment,
    MergeAlignConfig,
    MergeLayout,
)

logger = logging.getLogger(__name__)


class MergeAlignError(Exception):
    """Base exception for merge alignment operations."""

    pass


class DiffOrderError(MergeAlignError):
    """Raised when a side's diff entries are unsorted or overlap on the base."""

    pass


def check_diff_order(changes: Sequence[LineDiffEntry], side: str = "input") -> None:
    """Fail fast unless entries are sorted and non-overlapping on the base side."""
    for prev, entry in zip(changes, changes[1:]):
        if entry.original.start_line < prev.original.end_line:
            raise DiffOrderError(
                f"{side}: entry at base {entry.original.start_line}-{entry.original.end_line} "
                f"starts before previous entry ends "
                f"({prev.original.start_line}-{prev.original.end_line})",
            )
        # Two pure insertions at the same base line would be one entry
        if entry.original.start_line == prev.original.start_line:
            raise DiffOrderError(
                f"{side}: duplicate entries at base line {entry.original.start_line}",
            )


def _fillers_for_region(
    ma: MappingAlignment,
    totals: List[int],
    left_fillers: List[Filler],
    right_fillers: List[Filler],
) -> None:
    """Append this region's fillers; `totals` carries [left, right] running sums."""
    for point in get_alignments(
        ma.base_range,
        ma.output1_range,
        ma.output2_range,
        ma.inner1,
        ma.inner2,
    ):
        if point.input1_line is None or point.input2_line is None:
            continue
        left_adj = point.input1_line + totals[0]
        right_adj = point.input2_line + totals[1]
        target = max(left_adj, right_adj)

        if target > left_adj:
            left_fillers.append(
                Filler(after_line=point.input1_line - 1, count=target - left_adj),
            )
            totals[0] += target - left_adj
        if target > right_adj:
            right_fillers.append(
                Filler(after_line=point.input2_line - 1, count=target - right_adj),
            )
            totals[1] += target - right_adj


def _contained(
    changes: Sequence[LineDiffEntry],
    ma: MappingAlignment,
) -> List[LineDiffEntry]:
    return [
        c
        for c in changes
        if c.original.start_line >= ma.base_range.start_line
        and c.original.end_line <= ma.base_range.end_line
    ]


def compute_merge_fillers_and_conflicts(
    changes1: Optional[Sequence[LineDiffEntry]],
    changes2: Optional[Sequence[LineDiffEntry]],
) -> MergeLayout:
    """Fillers for both variant panes plus the conflicting regions, in base order."""
    changes1 = list(changes1 or [])
    changes2 = list(changes2 or [])
    alignments = compute_mapping_alignments(changes1, changes2)

    left_fillers: List[Filler] = []
    right_fillers: List[Filler] = []
    conflict_blocks: List[ConflictBlock] = []
    totals = [0, 0]

    for ma in alignments:
        if ma.is_conflict:
            conflict_blocks.append(
                ConflictBlock(
                    **ma.model_dump(),
                    id=len(conflict_blocks),
                    left_changes=_contained(changes1, ma),
                    right_changes=_contained(changes2, ma),
                ),
            )
        _fillers_for_region(ma, totals, left_fillers, right_fillers)

    logger.debug(
        "%d groups, %d conflicts, filler lines left=%d right=%d",
        len(alignments),
        len(conflict_blocks),
        totals[0],
        totals[1],
    )
    return MergeLayout(
        left_fillers=left_fillers,
        right_fillers=right_fillers,
        conflict_blocks=conflict_blocks,
        mapping_alignments=alignments,
    )


def compute_merge_fillers(
    changes1: Optional[Sequence[LineDiffEntry]],
    changes2: Optional[Sequence[LineDiffEntry]],
) -> Tuple[List[Filler], List[Filler]]:
    """Filler lists only, (left, right)."""
    layout = compute_merge_fillers_and_conflicts(changes1, changes2)
    return layout.left_fillers, layout.right_fillers


class MergeAligner:
    """Config-aware front door used by the CLI and the merge session."""

    def __init__(self, config: Optional[MergeAlignConfig] = None):
        self.config = config or MergeAlignConfig()

    def compute(
        self,
        changes1: Optional[Sequence[LineDiffEntry]],
        changes2: Optional[Sequence[LineDiffEntry]],
    ) -> MergeLayout:
        """Validate inputs per config, then compute the layout."""
        changes1 = list(changes1 or [])
        changes2 = list(changes2 or [])
        if self.config.check_diff_order:
            check_diff_order(changes1, side="base_to_input1")
            check_diff_order(changes2, side="base_to_input2")
        else:
            logger.debug("diff order check disabled; trusting caller")
        return compute_merge_fillers_and_conflicts(changes1, changes2)

    def regions(
        self,
        layout: MergeLayout,
        base_line_count: int,
    ) -> List[MappingAlignment]:
        """All base lines grouped: change groups plus the unchanged gaps."""
        return cover_base_text(layout.mapping_alignments, base_line_count)
