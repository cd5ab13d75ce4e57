"""Proposition id allocation for a single encoding session."""

import numpy as np


class VariableAllocator:
    """Issue strictly increasing, never reused proposition ids, starting at 1.

    One allocator belongs to one encoding session; there is no global counter, so independent
    puzzles can be encoded concurrently, each with its own allocator/engine pair.
    """

    def __init__(self) -> None:
        self.top: int = 0
        """Highest id issued so far (0 if none)."""

    def next(self) -> int:
        """Allocate a single fresh id."""
        self.top += 1
        return self.top

    def batch(self, count: int) -> range:
        """Allocate `count` consecutive ids."""
        if count < 0:
            raise ValueError(f"Cannot allocate a negative number of ids ({count}).")
        start = self.top + 1
        self.top += count
        return range(start, self.top + 1)

    def block(self, *shape: int) -> np.ndarray:
        """Allocate ids for a whole tensor of propositions, filled in row-major order.

        For example `block(n, n, n)` returns an array whose entry `[i, j, v]` is the id of
        bit `v` of cell `(i, j)`.
        """
        ids = self.batch(int(np.prod(shape)))
        return np.arange(ids.start, ids.stop, dtype=np.int64).reshape(shape)

    def advance_to(self, top: int) -> None:
        """Reserve every id up to `top`, e.g. auxiliaries created by an external encoder."""
        if top > self.top:
            self.top = top
