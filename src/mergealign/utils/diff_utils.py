# src/mergealign/utils/diff_utils.py
"""
difflib-backed line diff producing LineDiffEntry lists.

The alignment engine only consumes diff output; this adapter lets the CLI and
tests run end to end without an external diff oracle.
"""

import difflib
from typing import List, Sequence

from ..schema import CharRange, InnerChange, LineDiffEntry, LineRange


def _offset_to_position(text: str, offset: int, first_line: int) -> tuple[int, int]:
    """(line, column) of a character offset inside a block starting at first_line."""
    line = first_line + text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start + 1


def _char_range(text: str, start: int, end: int, first_line: int) -> CharRange:
    start_line, start_col = _offset_to_position(text, start, first_line)
    end_line, end_col = _offset_to_position(text, end, first_line)
    return CharRange(
        start_line=start_line,
        start_col=start_col,
        end_line=end_line,
        end_col=end_col,
    )


def _whole_lines(start: int, end: int) -> CharRange:
    return CharRange(start_line=start, start_col=1, end_line=end, end_col=1)


def compute_inner_changes(
    original_lines: Sequence[str],
    modified_lines: Sequence[str],
    original_start: int,
    modified_start: int,
) -> List[InnerChange]:
    """Character-level edits between two replaced line blocks."""
    if not original_lines or not modified_lines:
        return [
            InnerChange(
                original=_whole_lines(
                    original_start, original_start + len(original_lines)
                ),
                modified=_whole_lines(
                    modified_start, modified_start + len(modified_lines)
                ),
            ),
        ]

    # Each line keeps its terminator so block ends land on (end_line, 1)
    a = "".join(f"{line}\n" for line in original_lines)
    b = "".join(f"{line}\n" for line in modified_lines)
    sm = difflib.SequenceMatcher(None, a, b, autojunk=False)

    inner: List[InnerChange] = []
    for tag, i1, i2, j1, j2 in sm.get_opcodes():
        if tag == "equal":
            continue
        inner.append(
            InnerChange(
                original=_char_range(a, i1, i2, original_start),
                modified=_char_range(b, j1, j2, modified_start),
            ),
        )
    return inner


def compute_line_diff(
    original_lines: Sequence[str],
    modified_lines: Sequence[str],
    char_level: bool = True,
    ignore_trim_whitespace: bool = False,
) -> List[LineDiffEntry]:
    """Sorted, non-overlapping diff entries (1-based, end exclusive)."""
    if ignore_trim_whitespace:
        a_keys = [line.strip() for line in original_lines]
        b_keys = [line.strip() for line in modified_lines]
    else:
        a_keys = list(original_lines)
        b_keys = list(modified_lines)

    sm = difflib.SequenceMatcher(None, a_keys, b_keys, autojunk=False)
    entries: List[LineDiffEntry] = []

    for tag, i1, i2, j1, j2 in sm.get_opcodes():
        if tag == "equal":
            continue
        inner = (
            compute_inner_changes(
                original_lines[i1:i2],
                modified_lines[j1:j2],
                i1 + 1,
                j1 + 1,
            )
            if char_level
            else []
        )
        entries.append(
            LineDiffEntry(
                original=LineRange(start_line=i1 + 1, end_line=i2 + 1),
                modified=LineRange(start_line=j1 + 1, end_line=j2 + 1),
                inner_changes=inner,
            ),
        )

    return entries
