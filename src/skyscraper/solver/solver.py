"""Main solver module for Skyscraper puzzles."""

import hashlib
import sys
from dataclasses import asdict, dataclass
from datetime import datetime
from pathlib import Path
from pprint import pprint
from time import time
from typing import Literal, TextIO

import numpy as np

from skyscraper.board import Grid
from skyscraper.clues import CLUE_ORDER, PuzzleClues, parse_clues
from skyscraper.errors import SolverStateError
from skyscraper.solver.allocator import VariableAllocator
from skyscraper.solver.config import SolverConfig
from skyscraper.solver.config import config as solver_config
from skyscraper.solver.engine import SatEngine
from skyscraper.solver.extract import extract_grid
from skyscraper.solver.order import OrderEncoder, get_exactly_one
from skyscraper.solver.utils import TIMESTAMP_FMT, Direction, int_comma, time_str
from skyscraper.solver.visibility import VisibilityEncoder


@dataclass(kw_only=True)
class SolveStats:
    """Size and timing of one encoding session."""

    n: int
    """Grid size."""

    variables: int = 0
    """Number of proposition ids allocated."""

    clauses: int = 0
    """Number of clauses handed to the engine."""

    cardinality_constraints: int = 0
    """Number of cardinality constraints handed to the engine (native or encoded)."""

    encode_time: float = 0.0
    """Seconds spent building the formula."""

    solve_time: float = 0.0
    """Seconds spent in the satisfiability decision."""


@dataclass(kw_only=True)
class SolveResult:
    """Outcome of a solve: a grid, or a well-formed "no solution" answer."""

    status: Literal["solved", "unsatisfiable"]
    grid: Grid | None
    stats: SolveStats

    @property
    def solved(self) -> bool:
        return self.status == "solved"


class SkyscraperSolver:
    """One-shot encoding session for an N x N skyscraper puzzle.

    Set clues and given values, then call `solve` once.  The session owns its own allocator and
    engine, so independent solvers may run on separate threads.
    """

    def __init__(self, n: int, *, config: SolverConfig | None = None) -> None:
        if n < 1:
            raise ValueError(f"Grid size must be positive, got {n}.")
        self.n = n
        self.config = config if config is not None else solver_config

        self.clues = np.zeros((len(Direction), n), dtype=np.int64)
        """Visibility clues, `clues[direction][line]`; 0 means unconstrained."""

        self.initial = np.zeros((n, n), dtype=np.int64)
        """Given values; 0 means empty."""

        self._used = False

    def set_visibility_clue(self, direction: Direction, line: int, count: int) -> None:
        """Require `count` buildings visible on `line` from `direction` (0 removes the clue)."""
        direction = Direction(direction)
        if not 0 <= line < self.n:
            raise IndexError(f"Line {line} is out of range for a {self.n}x{self.n} grid.")
        if not 0 <= count <= self.n:
            raise ValueError(f"Visibility clue {count} is out of range [0, {self.n}].")
        self.clues[direction, line] = count

    def set_clues(self, clues: PuzzleClues) -> None:
        """Set all four clue arrays."""
        if clues.size != self.n:
            raise ValueError(
                f"Clues are for a {clues.size}x{clues.size} grid, not {self.n}x{self.n}."
            )
        for direction in CLUE_ORDER:
            for line, count in enumerate(clues.clues_for(direction)):
                self.set_visibility_clue(direction, line, count)

    def set_given_value(self, row: int, col: int, value: int) -> None:
        """Prefill cell (row, col) with `value` (0 clears it)."""
        if not (0 <= row < self.n and 0 <= col < self.n):
            raise IndexError(f"Cell ({row}, {col}) is outside the {self.n}x{self.n} grid.")
        if not 0 <= value <= self.n:
            raise ValueError(f"Given value {value} is out of range [0, {self.n}].")
        self.initial[row, col] = value

    def solve(self, deadline: float | None = None) -> SolveResult:
        """Build the formula, decide it and extract the grid.

        Args:
            deadline (float | None): Seconds allowed for the decision.  Defaults to the
                configured deadline.

        Returns:
            A SolveResult with status "solved" and the grid, or "unsatisfiable" and no grid.

        Raises:
            ContradictionError: If the clauses are inconsistent while being added.
            SolveTimeoutError: If the deadline expired.
            SolverStateError: If this solver was already used.
        """
        if self._used:
            raise SolverStateError("A SkyscraperSolver can only solve once.")
        self._used = True
        if deadline is None:
            deadline = self.config.deadline

        stats = SolveStats(n=self.n)
        start_time = time()
        allocator = VariableAllocator()
        with SatEngine(
            allocator,
            backend=self.config.sat_backend,
            native_cardinality=self.config.native_cardinality,
            cardinality_encoding=self.config.cardinality_encoding,
        ) as engine:
            # Cell order bits first, then visibility indicators, then per-constraint auxiliaries
            order = OrderEncoder(
                engine,
                allocator,
                self.n,
                exactly_one=get_exactly_one(self.config.exactly_one_encoding),
            )
            visibility = VisibilityEncoder(engine, allocator, order.cell_order, self.n)

            order.add_monotonicity()
            order.add_permutation_constraints()
            visibility.add_constraints(self.clues)
            order.add_given_values(self.initial)

            encoded_time = time()
            stats.encode_time = encoded_time - start_time
            stats.variables = allocator.top
            stats.clauses = engine.n_clauses
            stats.cardinality_constraints = engine.n_cardinality

            satisfiable = engine.is_satisfiable(deadline)
            stats.solve_time = time() - encoded_time

            if not satisfiable:
                return SolveResult(status="unsatisfiable", grid=None, stats=stats)
            grid = extract_grid(engine.model(), order.cell_order)
        return SolveResult(status="solved", grid=grid, stats=stats)


def solve_clues(
    text: str,
    *,
    config: SolverConfig | None = None,
    deadline: float | None = None,
) -> SolveResult:
    """Parse a clue string and solve the puzzle it describes."""
    clues = parse_clues(text)
    solver = SkyscraperSolver(clues.size, config=config)
    solver.set_clues(clues)
    return solver.solve(deadline)


def run(
    clues: PuzzleClues,
    *,
    loops: int = 1,
    warmup: int = 0,
    deadline: float | None = None,
    config: SolverConfig | None = None,
    logfile: Path | None = None,
) -> SolveResult:
    """Solve a puzzle from the command line, logging the run to a file.

    Args:
        clues (PuzzleClues): The puzzle.
        loops (int): Number of timed solves; the reported time is the average.
        warmup (int): Number of untimed solves run first.
        deadline (float | None): Seconds allowed per decision.
        config (SolverConfig | None): Solver configuration (defaults to the global one).
        logfile (Path | None): Log file path.  Defaults to a file under `config.log_dir`.

    Returns:
        The result of the last timed solve.
    """
    if loops < 1:
        raise ValueError(f"loops must be at least 1, got {loops}.")
    if warmup < 0:
        raise ValueError(f"warmup cannot be negative, got {warmup}.")
    config = config if config is not None else solver_config

    if logfile is None:
        digest = hashlib.sha1(str(clues).encode("utf-8")).hexdigest()[:12]
        logfile = Path(config.log_dir) / f"{clues.size}x{clues.size}" / f"{digest}.log"
    print(f"Log file: {logfile}")
    logfile.parent.mkdir(parents=True, exist_ok=True)

    with open(logfile, "w", encoding="utf-8") as logf:
        try:
            return solve_timed(
                clues, loops=loops, warmup=warmup, deadline=deadline, config=config, logf=logf
            )
        except KeyboardInterrupt:
            print("Solver interrupted by user.", file=logf, flush=True)
            print("Solver interrupted by user.")
            sys.exit(1)


def solve_timed(
    clues: PuzzleClues,
    *,
    loops: int,
    warmup: int,
    deadline: float | None,
    config: SolverConfig,
    logf: TextIO,
) -> SolveResult:
    """Run warm-up and timed solves of one puzzle, writing progress to `logf`."""
    print(f"Puzzle: {clues}", file=logf, flush=True)
    print(f"Dimensions: {clues.size}x{clues.size}", file=logf, flush=True)
    for direction in CLUE_ORDER:
        print(f"  {direction.name.lower():>5}: {list(clues.clues_for(direction))}", file=logf)
    print("Solver config:", file=logf, flush=True)
    pprint(config.model_dump(), stream=logf, width=120)
    start_str = datetime.now().astimezone().strftime(TIMESTAMP_FMT)
    print(f"Start time: {start_str}", file=logf, flush=True)

    def solve_once() -> SolveResult:
        solver = SkyscraperSolver(clues.size, config=config)
        solver.set_clues(clues)
        return solver.solve(deadline)

    for i in range(warmup):
        print(f"Warm-up run {i + 1}/{warmup}", file=logf, flush=True)
        solve_once()

    start_time = time()
    for _ in range(loops):
        result = solve_once()
    elapsed = (time() - start_time) / loops

    stats = result.stats
    print("Encoding stats:", file=logf, flush=True)
    pprint(asdict(stats), stream=logf, width=120)
    print(
        f"Variables: {int_comma(stats.variables)}, clauses: {int_comma(stats.clauses)}, "
        f"cardinality constraints: {int_comma(stats.cardinality_constraints)}",
        file=logf,
        flush=True,
    )
    print(f"Time per run: {time_str(elapsed)} ({loops} run(s))", file=logf, flush=True)
    print(f"Time: {time_str(elapsed)}")

    if result.grid is not None:
        print("Solution found!", file=logf, flush=True)
        print(result.grid, file=logf, flush=True)
    else:
        print("No solution found.", file=logf, flush=True)
    return result
