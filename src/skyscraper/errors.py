"""Exception types raised by the Skyscraper solver.

An unsatisfiable puzzle is not an error: it is reported through
`SolveResult.status == "unsatisfiable"`.
"""


class SkyscraperError(Exception):
    """Base class for all errors raised by this package."""


class InputError(SkyscraperError, ValueError):
    """The puzzle text could not be parsed into a valid set of clues."""


class ContradictionError(SkyscraperError):
    """A clause added to the SAT engine is inconsistent with already-fixed unit clauses."""


class SolveTimeoutError(SkyscraperError, TimeoutError):
    """The SAT engine did not reach a decision before the deadline expired."""


class SolverStateError(SkyscraperError, RuntimeError):
    """A solver or engine method was called at the wrong point of its session."""
