"""
Merge session: a result text seeded from the base plus conflict tracking.

Conflict blocks keep a stable id; their position in the result is tracked
through edits so accept/discard actions keep hitting the right lines.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .core import MergeAlignError, MergeAligner
from .schema import ConflictBlock, LineRange, MergeLayout
from .utils.diff_utils import compute_line_diff

logger = logging.getLogger(__name__)

SIDES = ("left", "right", "result")


class SessionError(MergeAlignError):
    """Raised for operations on unknown blocks or sides."""

    pass


class ConflictTracker:
    """Stable block id -> current line range in the result text."""

    def __init__(self, blocks: Iterable[ConflictBlock]):
        # The result starts out as the base, so base ranges are the initial spans
        self._ranges: Dict[int, LineRange] = {b.id: b.base_range for b in blocks}

    def __contains__(self, block_id: int) -> bool:
        return block_id in self._ranges

    def range(self, block_id: int) -> LineRange:
        try:
            return self._ranges[block_id]
        except KeyError:
            raise SessionError(f"Unknown conflict block: {block_id}") from None

    def apply_edit(self, start_line: int, end_line: int, new_count: int) -> None:
        """Shift tracked ranges for result lines [start, end) replaced by new_count lines."""
        delta = new_count - (end_line - start_line)

        def map_start(s: int) -> int:
            if s <= start_line:
                return s
            if s >= end_line:
                return s + delta
            return start_line

        def map_end(e: int) -> int:
            if e < start_line:
                return e
            if e >= end_line:
                return e + delta
            return start_line + new_count

        for block_id, r in self._ranges.items():
            s = map_start(r.start_line)
            e = max(s, map_end(r.end_line))
            self._ranges[block_id] = LineRange(start_line=s, end_line=e)


class MergeSession:
    """Three inputs, a result text, and conflict resolution over it."""

    def __init__(
        self,
        base_lines: Sequence[str],
        left_lines: Sequence[str],
        right_lines: Sequence[str],
        layout: Optional[MergeLayout] = None,
        aligner: Optional[MergeAligner] = None,
    ):
        self.base_lines = list(base_lines)
        self.left_lines = list(left_lines)
        self.right_lines = list(right_lines)
        self.aligner = aligner or MergeAligner()

        if layout is None:
            cfg = self.aligner.config
            diff1 = compute_line_diff(
                self.base_lines,
                self.left_lines,
                char_level=cfg.char_level,
                ignore_trim_whitespace=cfg.ignore_trim_whitespace,
            )
            diff2 = compute_line_diff(
                self.base_lines,
                self.right_lines,
                char_level=cfg.char_level,
                ignore_trim_whitespace=cfg.ignore_trim_whitespace,
            )
            layout = self.aligner.compute(diff1, diff2)

        self.layout = layout
        self.result_lines: List[str] = list(self.base_lines)
        self.tracker = ConflictTracker(layout.conflict_blocks)

    # ----- Lookup -----

    @property
    def conflict_blocks(self) -> List[ConflictBlock]:
        return self.layout.conflict_blocks

    def block(self, block_id: int) -> ConflictBlock:
        for b in self.conflict_blocks:
            if b.id == block_id:
                return b
        raise SessionError(f"Unknown conflict block: {block_id}")

    def base_content(self, block: ConflictBlock) -> List[str]:
        return _slice(self.base_lines, block.base_range)

    def incoming_content(self, block: ConflictBlock) -> List[str]:
        return _slice(self.left_lines, block.output1_range)

    def current_content(self, block: ConflictBlock) -> List[str]:
        return _slice(self.right_lines, block.output2_range)

    def result_content(self, block: ConflictBlock) -> List[str]:
        return _slice(self.result_lines, self.tracker.range(block.id))

    # ----- State -----

    def is_block_active(self, block: ConflictBlock) -> bool:
        """A block is unresolved while its result lines still equal the base."""
        return self.result_content(block) == self.base_content(block)

    def accepted_side(self, block: ConflictBlock) -> Optional[str]:
        """None while unresolved; else incoming, current, both or edited."""
        if self.is_block_active(block):
            return None

        current = self.result_content(block)
        incoming = self.incoming_content(block)
        theirs = self.current_content(block)
        matches_incoming = current == incoming
        matches_current = current == theirs

        if matches_incoming and matches_current:
            return "both"
        if matches_incoming:
            return "incoming"
        if matches_current:
            return "current"
        if current == incoming + theirs:
            return "both"
        return "edited"

    def active_blocks(self) -> List[ConflictBlock]:
        return [b for b in self.conflict_blocks if self.is_block_active(b)]

    def find_conflict_at(
        self,
        line: int,
        side: str,
        allow_resolved: bool = False,
    ) -> Optional[ConflictBlock]:
        """Conflict block whose range on `side` contains `line` (1-based)."""
        for b in self.conflict_blocks:
            if not allow_resolved and not self.is_block_active(b):
                continue
            if self._side_range(b, side).contains(line):
                return b
        return None

    # ----- Editing -----

    def replace_lines(self, start_line: int, end_line: int, lines: Sequence[str]) -> None:
        """Replace result lines [start_line, end_line) and update tracking."""
        if start_line < 1 or end_line < start_line or end_line - 1 > len(self.result_lines):
            raise SessionError(
                f"Invalid result range {start_line}-{end_line} "
                f"(result has {len(self.result_lines)} lines)",
            )
        self.result_lines[start_line - 1 : end_line - 1] = list(lines)
        self.tracker.apply_edit(start_line, end_line, len(lines))

    def _apply(self, block: ConflictBlock, lines: List[str]) -> None:
        r = self.tracker.range(block.id)
        self.replace_lines(r.start_line, r.end_line, lines)

    def _resolve(self, block_id: int, choice: str) -> bool:
        block = self.block(block_id)
        if not self.is_block_active(block):
            logger.info("conflict %d already resolved; use discard first", block_id)
            return False

        if choice == "incoming":
            lines = self.incoming_content(block)
        elif choice == "current":
            lines = self.current_content(block)
        else:
            lines = self.incoming_content(block) + self.current_content(block)

        self._apply(block, lines)
        logger.info("conflict %d: accepted %s (%d lines)", block_id, choice, len(lines))
        return True

    def accept_incoming(self, block_id: int) -> bool:
        return self._resolve(block_id, "incoming")

    def accept_current(self, block_id: int) -> bool:
        return self._resolve(block_id, "current")

    def accept_both(self, block_id: int) -> bool:
        """Incoming lines first, then current."""
        return self._resolve(block_id, "both")

    def discard(self, block_id: int) -> bool:
        """Reset the block to its base content, resolved or not."""
        block = self.block(block_id)
        self._apply(block, self.base_content(block))
        logger.info("conflict %d: reset to base", block_id)
        return True

    # ----- Navigation -----

    def block_start_line(self, block: ConflictBlock, side: str) -> int:
        return self._side_range(block, side).start_line

    def next_conflict(self, cursor_line: int, side: str) -> Optional[Tuple[int, int, int]]:
        """(index, total, line) of the next active conflict, wrapping around."""
        active = self.active_blocks()
        if not active:
            return None
        for i, b in enumerate(active, start=1):
            start = self.block_start_line(b, side)
            if start > cursor_line:
                return i, len(active), start
        start = self.block_start_line(active[0], side)
        if start < cursor_line:
            return 1, len(active), start
        return None

    def prev_conflict(self, cursor_line: int, side: str) -> Optional[Tuple[int, int, int]]:
        """(index, total, line) of the previous active conflict, wrapping around."""
        active = self.active_blocks()
        if not active:
            return None
        for i in range(len(active), 0, -1):
            start = self.block_start_line(active[i - 1], side)
            if start < cursor_line:
                return i, len(active), start
        start = self.block_start_line(active[-1], side)
        if start > cursor_line:
            return len(active), len(active), start
        return None

    def _side_range(self, block: ConflictBlock, side: str) -> LineRange:
        if side == "left":
            return block.output1_range
        if side == "right":
            return block.output2_range
        if side == "result":
            return self.tracker.range(block.id)
        raise SessionError(f"Unknown side {side!r}; expected one of {SIDES}")


def _slice(lines: Sequence[str], r: LineRange) -> List[str]:
    if r.start_line >= r.end_line:
        return []
    return list(lines[r.start_line - 1 : r.end_line - 1])
