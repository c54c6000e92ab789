# src/mergealign/utils/fs_utils.py
"""
File system utilities for mergealign.
"""

from pathlib import Path, PurePosixPath
from typing import List, Optional


def posix(p: Path | str) -> str:
    """Normalize path to POSIX string."""
    return PurePosixPath(str(p)).as_posix()


def read_text(path: Path) -> Optional[str]:
    """Return file contents as text, or None if binary."""
    try:
        return path.read_text(encoding="utf-8")
    except UnicodeDecodeError:
        return None


def split_lines(text: str) -> List[str]:
    """Split on \\n or \\r\\n; a trailing newline does not add an empty line."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_lines(path: Path) -> List[str]:
    """Read a text file as a list of lines without terminators."""
    text = read_text(path)
    if text is None:
        raise ValueError(f"Binary file not supported: {posix(path)}")
    return split_lines(text)
