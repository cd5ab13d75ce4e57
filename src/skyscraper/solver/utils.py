"""Utility functions for the Skyscraper solver."""

from collections.abc import Iterable
from enum import IntEnum

TIMESTAMP_FMT = "%Y-%m-%d %H:%M:%S.%f %Z%z"


class Direction(IntEnum):
    """Enumeration for the four viewpoints around the grid."""

    LEFT = 0
    RIGHT = 1
    UP = 2
    DOWN = 3


def line_cells(direction: Direction, line: int, n: int) -> list[tuple[int, int]]:
    """Get the cells of a line in the order they are seen from a viewpoint.

    "left"/"right" act on rows, scanned left-to-right / right-to-left.  "up"/"down" act on
    columns, scanned top-to-bottom / bottom-to-top.  The first cell returned is always the
    one nearest the viewpoint.

    Args:
        direction (Direction): The viewpoint.
        line (int): Row index for LEFT/RIGHT, column index for UP/DOWN.
        n (int): The grid size.

    Returns:
        A list of (row, col) tuples.
    """
    if not 0 <= line < n:
        raise IndexError(f"Line {line} is out of range for a {n}x{n} grid.")
    if direction == Direction.LEFT:
        return [(line, col) for col in range(n)]
    if direction == Direction.RIGHT:
        return [(line, col) for col in reversed(range(n))]
    if direction == Direction.UP:
        return [(row, line) for row in range(n)]
    if direction == Direction.DOWN:
        return [(row, line) for row in reversed(range(n))]
    raise ValueError(f"Invalid direction: {direction}")


def count_visible(heights: Iterable[int]) -> int:
    """Count the buildings visible from the start of a sequence (its strict running maxima)."""
    visible = 0
    tallest = 0
    for height in heights:
        if height > tallest:
            visible += 1
            tallest = height
    return visible


def time_str(seconds: float) -> str:
    """Convert a time duration in seconds to a human-readable string.

    Args:
        seconds: Time duration in seconds.

    Returns:
        A string formatted as "HH:MM:SS.ss".
    """
    hours, rem = divmod(seconds, 3600)
    minutes, secs = divmod(rem, 60)
    return f"{int(hours):02}:{int(minutes):02}:{secs:05.2f}"


def int_comma(n: int) -> str:
    """Format an integer with commas as thousands separators."""
    return f"{n:,}"
