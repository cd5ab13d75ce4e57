"""Classes and functions for representing a solved grid."""

from collections.abc import Iterable

import numpy as np

from skyscraper.solver.utils import Direction, count_visible, line_cells


class Grid:
    """Store an N x N matrix of building heights.

    Supports 2D indexing (`grid[row, col]`) and reading lines in viewpoint scan order.
    """

    def __init__(self, data: Iterable[Iterable[int]]) -> None:
        self.data = np.array([list(row) for row in data], dtype=np.int64)
        if self.data.ndim != 2 or self.data.shape[0] != self.data.shape[1]:
            raise ValueError(f"Grid must be square, got shape {self.data.shape}.")

    @property
    def n(self) -> int:
        """The grid size."""
        return self.data.shape[0]

    def __str__(self) -> str:
        """N lines of N space-separated values."""
        return "\n".join(" ".join(str(value) for value in row) for row in self.data)

    def __repr__(self) -> str:
        return f"Grid({self.tolist()!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Grid):
            return np.array_equal(self.data, other.data)
        return NotImplemented

    def __getitem__(self, idx: tuple[int, int]) -> int:
        """Get the height at (row, col)."""
        if isinstance(idx, tuple) and len(idx) == 2:
            row, col = idx
            return int(self.data[row, col])
        raise IndexError("Invalid index type for Grid.")

    def tolist(self) -> list[list[int]]:
        """Return the grid as nested lists of ints."""
        return self.data.tolist()

    def rows(self) -> list[list[int]]:
        return self.data.tolist()

    def columns(self) -> list[list[int]]:
        return self.data.T.tolist()

    def line(self, direction: Direction, index: int) -> list[int]:
        """Heights of a line in the order they are seen from `direction`."""
        return [int(self.data[row, col]) for row, col in line_cells(direction, index, self.n)]

    def visible_counts(self, direction: Direction) -> list[int]:
        """Number of visible buildings on every line seen from `direction`."""
        return [count_visible(self.line(direction, i)) for i in range(self.n)]

    def is_latin_square(self) -> bool:
        """Check that every row and every column is a permutation of 1..N."""
        expected = np.arange(1, self.n + 1)
        sorted_rows = np.sort(self.data, axis=1)
        sorted_cols = np.sort(self.data, axis=0).T
        return bool((sorted_rows == expected).all() and (sorted_cols == expected).all())
