"""Order encoding of cell values and the Latin-square (permutation) constraints.

Each cell (i, j) owns N order bits; bit v stands for "value(i, j) > v".  Bit 0 is always true
(every value is at least 1) and the bits are monotone, so a value k is encoded as bits 0..k-1
true and bits k..N-1 false.
"""

from collections.abc import Callable, Iterable, Sequence
from typing import TypeAlias

from skyscraper.solver.allocator import VariableAllocator
from skyscraper.solver.engine import SatEngine

OrderBits: TypeAlias = Sequence[int]
ExactlyOne: TypeAlias = Callable[[SatEngine, list[int]], None]


def pairwise_exactly_one(engine: SatEngine, literals: list[int]) -> None:
    """At-least-one clause plus a mutual exclusion clause for every unordered pair.

    O(N^2) clauses per call, with no auxiliary variables.
    """
    engine.add_clause(literals)
    for a in range(len(literals)):
        for b in range(a + 1, len(literals)):
            engine.add_clause([-literals[a], -literals[b]])


def ladder_exactly_one(engine: SatEngine, literals: list[int]) -> None:
    """At-least-one clause plus a sequential-counter (ladder) at-most-one.

    O(N) clauses and N-1 auxiliary variables per call.
    """
    engine.add_clause(literals)
    engine.add_at_most(literals, 1, encoding="seqcounter")


EXACTLY_ONE_STRATEGIES: dict[str, ExactlyOne] = {
    "pairwise": pairwise_exactly_one,
    "ladder": ladder_exactly_one,
}


def get_exactly_one(name: str) -> ExactlyOne:
    """Look up an exactly-one strategy by name."""
    try:
        return EXACTLY_ONE_STRATEGIES[name]
    except KeyError:
        raise ValueError(f"Unknown exactly-one encoding: {name}") from None


class OrderEncoder:
    """Allocate the order bits of an N x N grid and constrain them to a Latin square."""

    def __init__(
        self,
        engine: SatEngine,
        allocator: VariableAllocator,
        n: int,
        *,
        exactly_one: ExactlyOne = pairwise_exactly_one,
    ) -> None:
        self.engine = engine
        self.allocator = allocator
        self.n = n
        self.exactly_one = exactly_one

        self.cell_order: list[list[list[int]]] = allocator.block(n, n, n).tolist()
        """`cell_order[i][j][v]` is the id of the proposition "value(i, j) > v"."""

    def add_monotonicity(self) -> None:
        """Force bit 0 of every cell true and add "bit v => bit v-1" for v = 1..N-1."""
        for row in self.cell_order:
            for bits in row:
                self.engine.add_clause([bits[0]])
                for v in range(1, self.n):
                    self.engine.add_clause([-bits[v], bits[v - 1]])

    def value_indicator(self, bits: OrderBits, value: int) -> int:
        """Create a fresh proposition bi-implied to "the integer encoded by `bits` equals `value`".

        Args:
            bits (OrderBits): Order bits of an integer variable in [1, len(bits)].
            value (int): The candidate value.

        Returns:
            The id of the indicator proposition.
        """
        n = len(bits)
        if not 1 <= value <= n:
            raise ValueError(f"Value {value} is out of range [1, {n}].")
        indicator = self.allocator.next()
        add = self.engine.add_clause
        if value == 1:
            if n > 1:
                # indicator <=> not bit 1
                add([-indicator, -bits[1]])
                add([bits[1], indicator])
            else:
                add([indicator])
        elif value == n:
            # indicator <=> bit N-1
            add([-indicator, bits[n - 1]])
            add([-bits[n - 1], indicator])
        else:
            # indicator <=> bit value-1 and not bit value
            add([-indicator, bits[value - 1]])
            add([-indicator, -bits[value]])
            add([-bits[value - 1], bits[value], indicator])
        return indicator

    def add_exactly_one(self, candidates: Iterable[tuple[OrderBits, int]]) -> list[int]:
        """Require exactly one of the candidate (integer variable, value) pairs to hold.

        Shared by the three permutation rules: one value per cell (same bits, every value),
        one cell per row holding a value and one cell per column holding a value (bits of each
        cell of the line, same value).

        Returns:
            The indicator ids, in candidate order.
        """
        indicators = [self.value_indicator(bits, value) for bits, value in candidates]
        self.exactly_one(self.engine, indicators)
        return indicators

    def add_permutation_constraints(self) -> None:
        """Every cell holds one value; every value appears once per row and once per column."""
        n = self.n
        cells = self.cell_order
        for i in range(n):
            for j in range(n):
                self.add_exactly_one((cells[i][j], value) for value in range(1, n + 1))

        for i in range(n):
            for value in range(1, n + 1):
                self.add_exactly_one((cells[i][j], value) for j in range(n))

        for j in range(n):
            for value in range(1, n + 1):
                self.add_exactly_one((cells[i][j], value) for i in range(n))

    def add_given_values(self, givens: Sequence[Sequence[int]]) -> None:
        """Fix prefilled cells with unit clauses on their order bits (0 means empty).

        Raises:
            ValueError: If the grid shape is not N x N or a value is outside [0, N].
        """
        n = self.n
        if len(givens) != n or any(len(row) != n for row in givens):
            raise ValueError(f"Given values must form a {n}x{n} grid.")
        for i in range(n):
            for j in range(n):
                value = int(givens[i][j])
                if not 0 <= value <= n:
                    raise ValueError(f"Given value {value} at ({i}, {j}) is out of range [0, {n}].")
                if value > 0:
                    self.fix_value(i, j, value)

    def fix_value(self, row: int, col: int, value: int) -> None:
        """Force cell (row, col) to hold `value`."""
        bits = self.cell_order[row][col]
        if value == 1:
            if self.n > 1:
                self.engine.add_clause([-bits[1]])
        elif value == self.n:
            self.engine.add_clause([bits[self.n - 1]])
        else:
            self.engine.add_clause([bits[value - 1]])
            self.engine.add_clause([-bits[value]])
