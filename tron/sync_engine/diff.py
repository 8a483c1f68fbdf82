"""
Diff Renderer

Line-level diff between two text buffers, produced lazily as tagged lines.

Author: Tron Project
License: MIT
"""

import difflib
from enum import Enum
from typing import Iterator, NamedTuple


class DiffTag(Enum):
    """Which side a diff line belongs to."""
    EQUAL = " "
    DELETE = "-"
    INSERT = "+"


class DiffLine(NamedTuple):
    """One line of diff output; ``text`` has its line terminator removed."""
    tag: DiffTag
    text: str

    @property
    def rendered(self) -> str:
        return f"{self.tag.value}{self.text}"


def _strip_eol(line: str) -> str:
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith(("\n", "\r")):
        return line[:-1]
    return line


def diff_lines(left: str, right: str) -> Iterator[DiffLine]:
    """
    Diff two texts line by line.

    Lines keep their terminators while being compared, so a missing final
    newline counts as a change. Within a replaced block the deleted lines
    come before the inserted ones. Every line of both inputs appears
    exactly once; lines common to both appear once as EQUAL.

    Callers are expected to check ``left == right`` first and report the
    files as identical instead of rendering.

    Args:
        left: Text shown as the "before" side (DELETE lines)
        right: Text shown as the "after" side (INSERT lines)

    Yields:
        DiffLine for every line, in display order
    """
    a = left.splitlines(keepends=True)
    b = right.splitlines(keepends=True)
    matcher = difflib.SequenceMatcher(None, a, b, autojunk=False)

    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            for line in a[i1:i2]:
                yield DiffLine(DiffTag.EQUAL, _strip_eol(line))
            continue
        if tag in ("delete", "replace"):
            for line in a[i1:i2]:
                yield DiffLine(DiffTag.DELETE, _strip_eol(line))
        if tag in ("insert", "replace"):
            for line in b[j1:j2]:
                yield DiffLine(DiffTag.INSERT, _strip_eol(line))
