"""Parsing and loading of skyscraper visibility clues."""

from dataclasses import dataclass
from os import PathLike
from pathlib import Path

from skyscraper.board import Grid
from skyscraper.errors import InputError
from skyscraper.solver.utils import Direction

CLUE_ORDER = (Direction.UP, Direction.DOWN, Direction.LEFT, Direction.RIGHT)
"""Order of the four clue arrays in the puzzle text."""


@dataclass
class PuzzleClues:
    """The visibility clues around an N x N grid."""

    up: tuple[int, ...]
    """Clues above each column, seen top-to-bottom."""

    down: tuple[int, ...]
    """Clues below each column, seen bottom-to-top."""

    left: tuple[int, ...]
    """Clues left of each row, seen left-to-right."""

    right: tuple[int, ...]
    """Clues right of each row, seen right-to-left."""

    def __post_init__(self) -> None:
        """Validate the clues."""
        self.up, self.down, self.left, self.right = (
            tuple(int(c) for c in side) for side in (self.up, self.down, self.left, self.right)
        )
        n = len(self.up)
        if n == 0:
            raise InputError("Clues must describe a grid of size at least 1.")
        if not len(self.down) == len(self.left) == len(self.right) == n:
            raise InputError("All four clue arrays must have the same length.")
        for direction in CLUE_ORDER:
            for clue in self.clues_for(direction):
                if not 0 <= clue <= n:
                    raise InputError(f"Clue {clue} is out of range [0, {n}]")

    @property
    def size(self) -> int:
        """The grid size N."""
        return len(self.up)

    def __str__(self) -> str:
        """The clues in puzzle-text order."""
        return " ".join(str(c) for d in CLUE_ORDER for c in self.clues_for(d))

    def clues_for(self, direction: Direction) -> tuple[int, ...]:
        """Get the clue array for a viewpoint."""
        if direction == Direction.UP:
            return self.up
        if direction == Direction.DOWN:
            return self.down
        if direction == Direction.LEFT:
            return self.left
        if direction == Direction.RIGHT:
            return self.right
        raise ValueError(f"Invalid direction: {direction}")

    @classmethod
    def from_grid(cls, grid: Grid) -> "PuzzleClues":
        """Compute the complete set of clues satisfied by a solved grid."""
        return cls(
            up=tuple(grid.visible_counts(Direction.UP)),
            down=tuple(grid.visible_counts(Direction.DOWN)),
            left=tuple(grid.visible_counts(Direction.LEFT)),
            right=tuple(grid.visible_counts(Direction.RIGHT)),
        )


def parse_clues(text: str | None) -> PuzzleClues:
    """Parse a string of whitespace-separated clues.

    The number of integers must be a multiple of 4; with N = count / 4 the clues are N "up",
    N "down", N "left" and N "right" clues, each an integer in [0, N].

    Raises:
        InputError: If the text is None or blank, the count is not a multiple of 4, a token is
            not an integer, or a clue is out of range.
    """
    if text is None:
        raise InputError("Input string cannot be None")
    parts = text.split()
    if not parts:
        raise InputError("Input string cannot be empty")
    if len(parts) % 4 != 0:
        raise InputError("The number of clues must be a multiple of 4")

    n = len(parts) // 4
    clues: list[int] = []
    for part in parts:
        try:
            clue = int(part)
        except ValueError:
            raise InputError(f"Invalid integer found in input: {part}") from None
        if not 0 <= clue <= n:
            raise InputError(f"Clue {clue} is out of range [0, {n}]")
        clues.append(clue)

    return PuzzleClues(
        up=tuple(clues[0:n]),
        down=tuple(clues[n : 2 * n]),
        left=tuple(clues[2 * n : 3 * n]),
        right=tuple(clues[3 * n : 4 * n]),
    )


def load_puzzles(path: PathLike | str) -> list[PuzzleClues]:
    """Load puzzles from a file, one clue line per puzzle.

    Blank lines and lines starting with '#' are skipped.

    Raises:
        InputError: If a line cannot be parsed; the message names the line number.
    """
    puzzles = []
    with open(Path(path), "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            try:
                puzzles.append(parse_clues(line))
            except InputError as e:
                raise InputError(f"{path}, line {line_no}: {e}") from None
    return puzzles
