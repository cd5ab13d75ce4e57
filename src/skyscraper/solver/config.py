"""Skyscraper solver configuration."""

from typing import Literal

from dotenv import find_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine the environment file path, or None if not found
ENV_FILE = find_dotenv() or None

CardinalityEncoding = Literal[
    "seqcounter", "sortnetwrk", "cardnetwrk", "totalizer", "mtotalizer", "kmtotalizer"
]


class SolverConfig(BaseSettings):
    """Configuration settings for the Skyscraper solver."""

    sat_backend: str = "minicard"
    """Name of the python-sat backend (see `pysat.solvers.SolverNames`). Default: "minicard"."""

    exactly_one_encoding: Literal["pairwise", "ladder"] = "pairwise"
    """Encoding used for the exactly-one (permutation) constraints.

    "pairwise" adds O(N^2) binary exclusion clauses and no auxiliary variables.  "ladder" uses a
    sequential counter with O(N) clauses and auxiliary variables, better suited to large grids.
    """

    cardinality_encoding: CardinalityEncoding = "seqcounter"
    """Clausal encoding of the visibility counts, used when native cardinality is unavailable."""

    native_cardinality: bool = True
    """Use the backend's native at-most constraints when it supports them. Default: True."""

    deadline: float | None = None
    """Maximum number of seconds per satisfiability call.  If None (default), no limit."""

    log_dir: str = "logs"
    """Directory in which the command-line driver writes its per-run log files."""

    model_config = SettingsConfigDict(
        env_prefix="SKYSCRAPER_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="forbid",
    )


config = SolverConfig()
