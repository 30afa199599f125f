"""
Shortest distinguishing suffixes for a set of file paths.

Used to label linked files in lists where several share a file name:
``x/y/paper.bib`` and ``x/z/paper.bib`` are shown as ``y/paper.bib`` and
``z/paper.bib``.
"""

import os
from collections import Counter


def _split(path: str, separator: str) -> list[str]:
    """Split into segments, ignoring trailing separators."""
    parts = path.split(separator)
    while len(parts) > 1 and not parts[-1]:
        parts.pop()
    return parts


def unique_path_substrings(paths: list[str], separator: str = os.sep) -> list[str]:
    """
    Create the minimal unique path substring for each path.

    Suffixes grow one segment per round, right to left. After each round
    every suffix that occurs exactly once across all current suffixes is
    settled and stops growing. Paths run out of segments independently, so
    genuinely duplicate paths come back as their full path string.

    Args:
        paths: Path strings
        separator: Segment separator used for splitting and joining

    Returns:
        One suffix per input path, in input order
    """
    segments = [_split(path, separator) for path in paths]
    # index of the next segment to consume; -1 once exhausted or settled
    cursors = [len(parts) - 1 for parts in segments]
    suffixes = [""] * len(paths)

    while any(cursor >= 0 for cursor in cursors):
        for i, parts in enumerate(segments):
            cursor = cursors[i]
            if cursor < 0:
                continue
            if suffixes[i]:
                suffixes[i] = parts[cursor] + separator + suffixes[i]
            else:
                suffixes[i] = parts[cursor]
            cursors[i] = cursor - 1

        counts = Counter(suffixes)
        for i, suffix in enumerate(suffixes):
            if counts[suffix] == 1:
                cursors[i] = -1

    return suffixes
