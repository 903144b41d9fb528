"""
Line-level diff between two versions of a template.
"""
import re
from typing import List

from ..schemas.enums import DiffKind
from ..schemas.template import DiffLine

_LINE_BREAK = re.compile(r"\r?\n")


def split_lines(text: str) -> List[str]:
    """Split on line breaks; the empty string has no lines."""
    if not text:
        return []
    return _LINE_BREAK.split(text)


def diff_lines(a: str, b: str) -> List[DiffLine]:
    """
    Compute a minimal line edit script turning ``a`` into ``b``.

    Uses a longest-common-subsequence table over the two line lists. When
    both neighbours keep the same LCS length the line from ``a`` is consumed
    first, so deletions always precede additions in a changed hunk.

    Args:
        a: Original text
        b: New text

    Returns:
        A list of EQUAL, DEL and ADD lines in output order
    """
    lines_a = split_lines(a)
    lines_b = split_lines(b)
    n, m = len(lines_a), len(lines_b)

    # lcs[i][j] = LCS length of lines_a[i:] and lines_b[j:]
    lcs = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        for j in range(m - 1, -1, -1):
            if lines_a[i] == lines_b[j]:
                lcs[i][j] = lcs[i + 1][j + 1] + 1
            else:
                lcs[i][j] = max(lcs[i + 1][j], lcs[i][j + 1])

    result: List[DiffLine] = []
    i = j = 0
    while i < n and j < m:
        if lines_a[i] == lines_b[j]:
            result.append(DiffLine(kind=DiffKind.EQUAL, text=lines_a[i]))
            i += 1
            j += 1
        elif lcs[i + 1][j] >= lcs[i][j + 1]:
            result.append(DiffLine(kind=DiffKind.DEL, text=lines_a[i]))
            i += 1
        else:
            result.append(DiffLine(kind=DiffKind.ADD, text=lines_b[j]))
            j += 1

    result.extend(DiffLine(kind=DiffKind.DEL, text=line) for line in lines_a[i:])
    result.extend(DiffLine(kind=DiffKind.ADD, text=line) for line in lines_b[j:])
    return result
