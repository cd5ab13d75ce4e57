"""Shared fixtures and assertion helpers for the Skyscraper tests."""

import pytest

from skyscraper.board import Grid
from skyscraper.clues import PuzzleClues
from skyscraper.solver.config import SolverConfig
from skyscraper.solver.engine import SatEngine
from skyscraper.solver.utils import Direction, count_visible

SOLVER_VARIANTS = {
    "minicard-native": {"sat_backend": "minicard"},
    "minicard-ladder-encoded": {
        "sat_backend": "minicard",
        "native_cardinality": False,
        "exactly_one_encoding": "ladder",
    },
    "glucose-totalizer": {"sat_backend": "glucose4", "cardinality_encoding": "totalizer"},
}


@pytest.fixture
def default_config(tmp_path) -> SolverConfig:
    """The default configuration, logging under a temporary directory."""
    return SolverConfig(log_dir=str(tmp_path / "logs"))


@pytest.fixture(params=list(SOLVER_VARIANTS), ids=list(SOLVER_VARIANTS))
def any_config(request, tmp_path) -> SolverConfig:
    """Every supported backend / encoding combination."""
    return SolverConfig(log_dir=str(tmp_path / "logs"), **SOLVER_VARIANTS[request.param])


def latin_square(perm: list[int], step: int = 1) -> list[list[int]]:
    """Latin square whose cell (i, j) holds perm[(i + step * j) % n].

    `step` must be coprime with n.
    """
    n = len(perm)
    return [[perm[(i + step * j) % n] for j in range(n)] for i in range(n)]


def assert_latin_square(grid: Grid) -> None:
    """Every row and every column is a permutation of 1..N."""
    n = grid.n
    for i, row in enumerate(grid.rows()):
        assert sorted(row) == list(range(1, n + 1)), f"Row {i} is not a permutation: {row}"
    for j, col in enumerate(grid.columns()):
        assert sorted(col) == list(range(1, n + 1)), f"Column {j} is not a permutation: {col}"


def assert_visibility(grid: Grid, clues: PuzzleClues) -> None:
    """Every nonzero clue equals the number of running maxima seen from its edge."""
    for direction in Direction:
        for line, expected in enumerate(clues.clues_for(direction)):
            if expected == 0:
                continue
            actual = count_visible(grid.line(direction, line))
            assert actual == expected, (
                f"{direction.name} line {line}: expected {expected} visible, got {actual}\n{grid}"
            )


def add_pigeonhole(engine: SatEngine, pigeons: int, holes: int) -> None:
    """Clausal pigeonhole formula: unsatisfiable, and slow to refute for a CDCL solver."""
    seat = [list(engine.new_variables(holes)) for _ in range(pigeons)]
    for row in seat:
        engine.add_clause(row)
    for hole in range(holes):
        for p in range(pigeons):
            for q in range(p + 1, pigeons):
                engine.add_clause([-seat[p][hole], -seat[q][hole]])


@pytest.fixture
def slow_decisions(monkeypatch):
    """Make every solve also refute a 12-into-11 pigeonhole formula, so deadlines expire."""
    is_satisfiable = SatEngine.is_satisfiable

    def padded(engine, deadline=None):
        add_pigeonhole(engine, 12, 11)
        return is_satisfiable(engine, deadline)

    monkeypatch.setattr(SatEngine, "is_satisfiable", padded)
