"""Skyscraper Puzzle Solver.

Fills an N x N grid with a Latin square (each row and column a permutation of 1..N) so that the
number of buildings visible from each edge matches the given clues.  The puzzle is translated to
CNF with an order encoding of cell values and decided by a SAT solver (python-sat).
"""

import argparse
import sys
from pathlib import Path

from .clues import load_puzzles, parse_clues
from .errors import ContradictionError, InputError, SolveTimeoutError
from .solver import solver
from .solver.config import config as solver_config


def get_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="skyscraper",
        description="SAT-based skyscraper puzzle solver",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "clues",
        nargs="?",
        help="4N space-separated clues: N up, N down, N left, N right (0 = no clue)",
    )
    source.add_argument("-f", "--file", help="File with one clue line per puzzle")
    parser.add_argument("--loops", type=int, default=1, help="Number of timed runs (default: 1)")
    parser.add_argument("--warmup", type=int, default=0, help="Number of warm-up runs")
    parser.add_argument(
        "--deadline",
        type=float,
        default=solver_config.deadline,
        help="Seconds allowed per satisfiability decision",
    )
    parser.add_argument("--log-file", help="Log file path (default: under the configured log_dir)")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the Skyscraper solver.

    Returns:
        0 if every puzzle was solved, 1 if one has no solution, 2 on input errors or clause
        contradictions and 3 when a deadline expired.
    """
    args = get_parser().parse_args(argv)
    try:
        puzzles = load_puzzles(args.file) if args.file else [parse_clues(args.clues)]
    except (InputError, OSError) as e:
        print(f"Input error: {e}", file=sys.stderr)
        return 2

    exit_code = 0
    for clues in puzzles:
        logfile = Path(args.log_file) if args.log_file else None
        try:
            result = solver.run(
                clues,
                loops=args.loops,
                warmup=args.warmup,
                deadline=args.deadline,
                logfile=logfile,
            )
        except SolveTimeoutError as e:
            print(f"Timeout: {e}", file=sys.stderr)
            return 3
        except ContradictionError as e:
            print(f"Contradiction: {e}", file=sys.stderr)
            return 2
        except ValueError as e:
            print(f"Input error: {e}", file=sys.stderr)
            return 2

        if result.grid is not None:
            print(result.grid)
            print()
        else:
            print("No solution found.", file=sys.stderr)
            exit_code = 1
    return exit_code
