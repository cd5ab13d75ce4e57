"""Visibility (skyscraper rule) constraints over the order-encoded cell values."""

from collections.abc import Sequence

from skyscraper.solver.allocator import VariableAllocator
from skyscraper.solver.engine import SatEngine
from skyscraper.solver.utils import Direction, line_cells


class VisibilityEncoder:
    """Derive "visible" indicators per viewpoint and line, and bound their count to the clue.

    `visible[dir][line][k]` is the indicator of the k-th cell seen from viewpoint `dir` along
    `line` (k = 0 is the cell nearest the viewpoint).  A cell is visible when it is taller than
    every cell before it in that scan order.
    """

    def __init__(
        self,
        engine: SatEngine,
        allocator: VariableAllocator,
        cell_order: Sequence[Sequence[Sequence[int]]],
        n: int,
    ) -> None:
        self.engine = engine
        self.n = n
        self.cell_order = cell_order
        self.visible: list[list[list[int]]] = allocator.block(len(Direction), n, n).tolist()

    def add_constraints(self, clues: Sequence[Sequence[int]]) -> None:
        """Encode every nonzero clue.

        Args:
            clues (Sequence[Sequence[int]]): `clues[dir][line]`, indexed by `Direction`.
                0 means unconstrained.
        """
        for direction in Direction:
            for line in range(self.n):
                count = int(clues[direction][line])
                if count > 0:
                    self.add_line(direction, line, count)

    def add_line(self, direction: Direction, line: int, count: int) -> None:
        """Require exactly `count` buildings of `line` to be visible from `direction`."""
        n = self.n
        if not 1 <= count <= n:
            raise ValueError(f"Visibility clue {count} is out of range [1, {n}].")
        indicators = self.visible[direction][line]
        bits = [self.cell_order[row][col] for row, col in line_cells(direction, line, n)]
        add = self.engine.add_clause

        # The nearest building is always visible
        add([indicators[0]])

        for pos in range(1, n):
            current = bits[pos]
            # visible => current exceeds every threshold some predecessor exceeds
            for pred in range(pos):
                for v in range(n):
                    add([-indicators[pos], -bits[pred][v], current[v]])
            # current == h and every predecessor < h => visible
            for h in range(2, n + 1):
                clause = [-current[h - 1]]
                if h < n:
                    clause.append(current[h])
                clause.extend(bits[pred][h - 1] for pred in range(pos))
                clause.append(indicators[pos])
                add(clause)

        self.engine.add_exactly(indicators, count)

    def indicator_values(self, model_bits, direction: Direction, line: int) -> list[bool]:
        """Read the indicators of one line from a model, in scan order."""
        return [bool(model_bits[lit]) for lit in self.visible[direction][line]]
