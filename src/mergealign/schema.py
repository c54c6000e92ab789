# src/mergealign/schema.py
"""
Data model for the three-way alignment engine.

Value types (positions, lengths, ranges) are frozen and hashable. Line numbers
are 1-based and line ranges are end-exclusive, matching the diff oracle output.

Notes:
- Columns mean "before character N" (1-based).
- A TextLength with lines=0 stays on the same line; lines>0 ends `columns`
  into the last line.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


# -----------------------
# Position arithmetic
# -----------------------


class TextLength(BaseModel):
    """Relative span measured in (lines, columns)."""

    lines: int = Field(ge=0)
    columns: int = Field(ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def between(cls, start: "Position", end: "Position") -> "TextLength":
        if start.line == end.line:
            return cls(lines=0, columns=end.column - start.column)
        return cls(lines=end.line - start.line, columns=end.column - 1)

    def is_zero(self) -> bool:
        return self.lines == 0 and self.columns == 0

    def is_greater_than(self, other: "TextLength") -> bool:
        if self.lines != other.lines:
            return self.lines > other.lines
        return self.columns > other.columns


class Position(BaseModel):
    """A (line, column) point in a text, both 1-based."""

    line: int
    column: int = 1

    model_config = ConfigDict(frozen=True, extra="forbid")

    def key(self) -> Tuple[int, int]:
        return (self.line, self.column)

    def compare(self, other: "Position") -> int:
        """Return -1, 0 or 1 like a classic comparator."""
        if self.key() < other.key():
            return -1
        if self.key() > other.key():
            return 1
        return 0

    def is_before(self, other: "Position") -> bool:
        return self.key() < other.key()

    def add(self, length: TextLength) -> "Position":
        if length.lines == 0:
            return Position(line=self.line, column=self.column + length.columns)
        return Position(line=self.line + length.lines, column=length.columns + 1)


# -----------------------
# Diff oracle output
# -----------------------


class LineRange(BaseModel):
    """Half-open line span [start_line, end_line)."""

    start_line: int = Field(ge=0)
    end_line: int = Field(ge=0)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _check_order(self) -> "LineRange":
        if self.end_line < self.start_line:
            raise ValueError(
                f"end_line ({self.end_line}) must not precede start_line ({self.start_line})",
            )
        return self

    @property
    def length(self) -> int:
        return self.end_line - self.start_line

    @property
    def is_empty(self) -> bool:
        return self.end_line == self.start_line

    def contains(self, line: int) -> bool:
        return self.start_line <= line < self.end_line

    def delta(self, amount: int) -> "LineRange":
        return LineRange(
            start_line=self.start_line + amount,
            end_line=self.end_line + amount,
        )


class CharRange(BaseModel):
    """Character span inside a text; end is exclusive."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def start(self) -> Position:
        return Position(line=self.start_line, column=self.start_col)

    @property
    def end(self) -> Position:
        return Position(line=self.end_line, column=self.end_col)


class InnerChange(BaseModel):
    """One intra-line edit: a base-side char range and its variant-side range."""

    original: CharRange
    modified: CharRange

    model_config = ConfigDict(frozen=True, extra="forbid")


class LineDiffEntry(BaseModel):
    """One unit of a pairwise line diff (base -> variant)."""

    original: LineRange
    modified: LineRange
    inner_changes: List[InnerChange] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="forbid")


# -----------------------
# Intermediate alignment types
# -----------------------


class EqualRangeMapping(BaseModel):
    """A span without edits on one side, relative to the base."""

    input_start: Position
    input_end: Position
    output_start: Position
    output_end: Position

    model_config = ConfigDict(frozen=True, extra="forbid")


class CommonEqualSpan(BaseModel):
    """A base span and which side(s) hold an equal range over all of it."""

    input_pos: Position
    length: TextLength
    output1_pos: Optional[Position] = None
    output2_pos: Optional[Position] = None

    model_config = ConfigDict(frozen=True, extra="forbid")


class AlignmentPoint(BaseModel):
    """Synchronization point; absent fields do not take part in the sync."""

    input1_line: Optional[int] = None
    base_line: Optional[int] = None
    input2_line: Optional[int] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def _at_least_one(self) -> "AlignmentPoint":
        if self.input1_line is None and self.base_line is None and self.input2_line is None:
            raise ValueError("alignment point needs at least one line")
        return self

    @property
    def is_full_sync(self) -> bool:
        return (
            self.input1_line is not None
            and self.base_line is not None
            and self.input2_line is not None
        )

    def collides_with(self, other: "AlignmentPoint") -> bool:
        """True if any coordinate present on self equals the same one on other."""
        return (
            (self.input1_line is not None and self.input1_line == other.input1_line)
            or (self.base_line is not None and self.base_line == other.base_line)
            or (self.input2_line is not None and self.input2_line == other.input2_line)
        )


# -----------------------
# Results
# -----------------------


class MappingAlignment(BaseModel):
    """A grouped base region and the covering spans on both variants."""

    base_range: LineRange
    output1_range: LineRange
    output2_range: LineRange
    inner1: List[InnerChange] = Field(default_factory=list)
    inner2: List[InnerChange] = Field(default_factory=list)
    # Diff entries folded into this group, per side
    changes1: List[LineDiffEntry] = Field(default_factory=list)
    changes2: List[LineDiffEntry] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_changes1(self) -> bool:
        return bool(self.inner1) or self.output1_range.length != self.base_range.length

    @property
    def has_changes2(self) -> bool:
        return bool(self.inner2) or self.output2_range.length != self.base_range.length

    @property
    def is_conflict(self) -> bool:
        return self.has_changes1 and self.has_changes2


class Filler(BaseModel):
    """Insert `count` blank display lines right after `after_line`."""

    after_line: int
    count: int = Field(ge=1)

    model_config = ConfigDict(frozen=True, extra="forbid")


class ConflictBlock(MappingAlignment):
    """A mapping alignment where both variants changed relative to the base."""

    id: int = Field(ge=0)
    left_changes: List[LineDiffEntry] = Field(default_factory=list)
    right_changes: List[LineDiffEntry] = Field(default_factory=list)


class MergeLayout(BaseModel):
    """Everything a merge-view renderer needs to lay out the three panes."""

    left_fillers: List[Filler] = Field(default_factory=list)
    right_fillers: List[Filler] = Field(default_factory=list)
    conflict_blocks: List[ConflictBlock] = Field(default_factory=list)
    mapping_alignments: List[MappingAlignment] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflict_blocks) > 0


# -----------------------
# Configuration
# -----------------------


class Labels(BaseModel):
    """Display names for the three panes."""

    incoming: str = "incoming"
    current: str = "current"
    base: str = "base"

    model_config = ConfigDict(extra="forbid")


class MergeAlignConfig(BaseModel):
    schema_version: str = "0.1.0"

    # Validate that each side's diff entries are sorted and non-overlapping
    check_diff_order: bool = True

    # Bundled difflib oracle options
    char_level: bool = True
    ignore_trim_whitespace: bool = False

    labels: Labels = Field(default_factory=Labels)
    log_level: str = "WARNING"

    model_config = ConfigDict(extra="forbid")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, v: str) -> str:
        name = v.strip().upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"unknown log level: {v}")
        return name
