"""Adapter around a python-sat solver exposing the clause/cardinality interface the encoders use."""

from collections.abc import Iterable, Sequence
from threading import Timer

from bitarray import bitarray
from bitarray.util import zeros
from pysat.card import CardEnc, EncType
from pysat.formula import CNFPlus
from pysat.solvers import Solver

from skyscraper.errors import ContradictionError, SolverStateError, SolveTimeoutError
from skyscraper.solver.allocator import VariableAllocator


class SatEngine:
    """One SAT engine instance, owned exclusively by one encoding session.

    Literals are signed ints (negative = negation).  All clauses and cardinality constraints
    must be added before `is_satisfiable` is called; afterwards the engine is only read through
    `model`.
    """

    def __init__(
        self,
        allocator: VariableAllocator,
        *,
        backend: str = "minicard",
        native_cardinality: bool = True,
        cardinality_encoding: str = "seqcounter",
    ) -> None:
        """Create the underlying solver.

        Args:
            allocator (VariableAllocator): Id source for this session.
            backend (str): python-sat solver name.
            native_cardinality (bool): Hand at-most constraints to the backend when it
                supports them natively.
            cardinality_encoding (str): `pysat.card.EncType` name used otherwise.
        """
        if not hasattr(EncType, cardinality_encoding):
            raise ValueError(f"Unknown cardinality encoding: {cardinality_encoding}")
        self.allocator = allocator
        self._solver = Solver(name=backend)
        self._native = native_cardinality and self._solver.supports_atmost()
        self._encoding = getattr(EncType, cardinality_encoding)
        self._fixed: set[int] = set()
        self._model: bitarray | None = None

        self.n_clauses = 0
        """Number of clauses added (including those of encoded cardinality constraints)."""

        self.n_cardinality = 0
        """Number of cardinality constraints added, native or encoded."""

    def __enter__(self) -> "SatEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.delete()

    def delete(self) -> None:
        """Release the native solver."""
        if self._solver is not None:
            self._solver.delete()
            self._solver = None

    @property
    def native_cardinality(self) -> bool:
        """Whether cardinality constraints go to the backend natively."""
        return self._native

    def new_variable(self) -> int:
        """Allocate a fresh proposition id."""
        return self.allocator.next()

    def new_variables(self, count: int) -> range:
        """Allocate `count` fresh proposition ids."""
        return self.allocator.batch(count)

    def add_clause(self, literals: Iterable[int]) -> None:
        """Add a disjunction of literals.

        Raises:
            ContradictionError: If the clause is empty, or every literal in it is falsified by
                a unit clause added earlier.
        """
        solver = self._require_solver()
        clause = [int(lit) for lit in literals]
        if all(-lit in self._fixed for lit in clause):
            raise ContradictionError(f"Clause {clause} contradicts fixed unit clauses.")
        if len(clause) == 1:
            self._fixed.add(clause[0])
        solver.add_clause(clause)
        self.n_clauses += 1

    def add_at_least(
        self, literals: Sequence[int], k: int, *, encoding: str | None = None
    ) -> None:
        """Require at least `k` of the literals to be true.

        Args:
            literals (Sequence[int]): Literals over distinct propositions.
            k (int): Lower bound.
            encoding (str | None): Force a clausal `EncType` encoding, bypassing native
                cardinality.
        """
        lits = [int(lit) for lit in literals]
        if k <= 0:
            return
        if k > len(lits):
            raise ContradictionError(f"At least {k} of {len(lits)} literals cannot hold.")
        if k == 1:
            self.add_clause(lits)
            return
        if k == len(lits):
            for lit in lits:
                self.add_clause([lit])
            return
        if self._native and encoding is None:
            # at least k of L <=> at most |L| - k of the negations
            self._require_solver().add_atmost([-lit for lit in lits], len(lits) - k)
            self.n_cardinality += 1
            return
        self._add_encoded(
            CardEnc.atleast(
                lits=lits,
                bound=k,
                top_id=self.allocator.top,
                encoding=self._enc_type(encoding),
            )
        )

    def add_at_most(
        self, literals: Sequence[int], k: int, *, encoding: str | None = None
    ) -> None:
        """Require at most `k` of the literals to be true (see `add_at_least` for arguments)."""
        lits = [int(lit) for lit in literals]
        if k < 0:
            raise ContradictionError(f"At most {k} literals cannot hold.")
        if k >= len(lits):
            return
        if k == 0:
            for lit in lits:
                self.add_clause([-lit])
            return
        if self._native and encoding is None:
            self._require_solver().add_atmost(lits, k)
            self.n_cardinality += 1
            return
        self._add_encoded(
            CardEnc.atmost(
                lits=lits,
                bound=k,
                top_id=self.allocator.top,
                encoding=self._enc_type(encoding),
            )
        )

    def add_exactly(self, literals: Sequence[int], k: int) -> None:
        """Require exactly `k` of the literals to be true."""
        self.add_at_least(literals, k)
        self.add_at_most(literals, k)

    def is_satisfiable(self, deadline: float | None = None) -> bool:
        """Decide the clause set.

        Args:
            deadline (float | None): Maximum number of seconds to search.  None means no limit.

        Raises:
            SolveTimeoutError: If the deadline expired before a decision.
        """
        solver = self._require_solver()
        if deadline is None:
            result = solver.solve()
        else:
            timer = Timer(deadline, solver.interrupt)
            timer.start()
            try:
                result = solver.solve_limited(expect_interrupt=True)
            finally:
                timer.cancel()
                solver.clear_interrupt()
            if result is None:
                raise SolveTimeoutError(f"No decision within {deadline} seconds.")

        if result:
            model_bits = zeros(self.allocator.top + 1)
            for lit in solver.get_model() or []:
                if 0 < lit <= self.allocator.top:
                    model_bits[lit] = 1
            self._model = model_bits
        else:
            self._model = None
        return bool(result)

    def model(self) -> bitarray:
        """Truth values indexed by proposition id (bit 0 is unused).

        Only valid after `is_satisfiable` returned True.
        """
        if self._model is None:
            raise SolverStateError("No model available: the last decision was not satisfiable.")
        return self._model

    def _enc_type(self, encoding: str | None) -> int:
        if encoding is None:
            return self._encoding
        if not hasattr(EncType, encoding):
            raise ValueError(f"Unknown cardinality encoding: {encoding}")
        return getattr(EncType, encoding)

    def _add_encoded(self, cnf: CNFPlus) -> None:
        """Add the clauses of a `CardEnc` encoding, reserving its auxiliary ids."""
        self.allocator.advance_to(cnf.nv)
        for clause in cnf.clauses:
            self.add_clause(clause)
        self.n_cardinality += 1

    def _require_solver(self) -> Solver:
        if self._solver is None:
            raise SolverStateError("The SAT engine has already been released.")
        return self._solver
