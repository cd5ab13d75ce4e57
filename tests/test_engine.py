"""Tests for the SAT engine adapter and the variable allocator."""

from time import time

import numpy as np
import pytest

from skyscraper.errors import ContradictionError, SolverStateError, SolveTimeoutError
from skyscraper.solver.allocator import VariableAllocator
from skyscraper.solver.engine import SatEngine

from conftest import add_pigeonhole


class TestVariableAllocator:
    def test_ids_start_at_one_and_increase(self):
        allocator = VariableAllocator()
        assert [allocator.next() for _ in range(3)] == [1, 2, 3]
        assert allocator.top == 3

    def test_batch(self):
        allocator = VariableAllocator()
        allocator.next()
        assert list(allocator.batch(4)) == [2, 3, 4, 5]
        assert allocator.next() == 6

    def test_negative_batch_rejected(self):
        with pytest.raises(ValueError):
            VariableAllocator().batch(-1)

    def test_block_is_row_major(self):
        allocator = VariableAllocator()
        block = allocator.block(2, 3, 4)
        assert block.shape == (2, 3, 4)
        assert block[0, 0, 0] == 1
        assert block[0, 0, 3] == 4
        assert block[0, 1, 0] == 5
        assert block[1, 2, 3] == 24
        assert allocator.top == 24
        assert len(np.unique(block)) == 24

    def test_advance_to_never_goes_back(self):
        allocator = VariableAllocator()
        allocator.batch(10)
        allocator.advance_to(5)
        assert allocator.top == 10
        allocator.advance_to(20)
        assert allocator.next() == 21


class _NeverDecides:
    """Stand-in native solver whose limited solve always reports an interrupt."""

    def __init__(self):
        self.interrupted = False

    def solve_limited(self, expect_interrupt=False):
        assert expect_interrupt
        return None

    def interrupt(self):
        self.interrupted = True

    def clear_interrupt(self):
        pass

    def delete(self):
        pass


class TestSatEngine:
    def test_unit_clause_contradiction(self):
        with SatEngine(VariableAllocator()) as engine:
            x = engine.new_variable()
            engine.add_clause([x])
            with pytest.raises(ContradictionError):
                engine.add_clause([-x])

    def test_clause_falsified_by_units(self):
        with SatEngine(VariableAllocator()) as engine:
            x, y = engine.new_variables(2)
            engine.add_clause([-x])
            engine.add_clause([-y])
            with pytest.raises(ContradictionError):
                engine.add_clause([x, y])

    def test_empty_clause(self):
        with SatEngine(VariableAllocator()) as engine:
            with pytest.raises(ContradictionError):
                engine.add_clause([])

    def test_unsatisfiable_is_not_an_error(self):
        with SatEngine(VariableAllocator()) as engine:
            x, y = engine.new_variables(2)
            engine.add_clause([x, y])
            engine.add_clause([-x, y])
            engine.add_clause([x, -y])
            engine.add_clause([-x, -y])
            assert engine.is_satisfiable() is False
            with pytest.raises(SolverStateError):
                engine.model()

    def test_model_is_indexed_by_id(self):
        with SatEngine(VariableAllocator()) as engine:
            x, y, z = engine.new_variables(3)
            engine.add_clause([x])
            engine.add_clause([-y])
            engine.add_clause([-x, z])
            assert engine.is_satisfiable()
            model = engine.model()
            assert len(model) == 4
            assert model[x] and not model[y] and model[z]

    def test_model_before_solve(self):
        with SatEngine(VariableAllocator()) as engine:
            with pytest.raises(SolverStateError):
                engine.model()

    def test_released_engine(self):
        engine = SatEngine(VariableAllocator())
        engine.delete()
        with pytest.raises(SolverStateError):
            engine.add_clause([1])

    def test_native_cardinality_detection(self):
        with SatEngine(VariableAllocator(), backend="minicard") as engine:
            assert engine.native_cardinality
        with SatEngine(VariableAllocator(), backend="minicard", native_cardinality=False) as engine:
            assert not engine.native_cardinality
        with SatEngine(VariableAllocator(), backend="glucose4") as engine:
            assert not engine.native_cardinality

    def test_unknown_cardinality_encoding(self):
        with pytest.raises(ValueError):
            SatEngine(VariableAllocator(), cardinality_encoding="abacus")

    @pytest.mark.parametrize(
        "backend, native",
        [("minicard", True), ("minicard", False), ("glucose4", True)],
    )
    @pytest.mark.parametrize("k", [1, 2, 3, 5])
    def test_exactly_k(self, backend, native, k):
        allocator = VariableAllocator()
        with SatEngine(allocator, backend=backend, native_cardinality=native) as engine:
            lits = list(engine.new_variables(5))
            engine.add_exactly(lits, k)
            for lit in lits[:k]:
                engine.add_clause([lit])
            assert engine.is_satisfiable()
            model = engine.model()
            assert [bool(model[lit]) for lit in lits] == [True] * k + [False] * (5 - k)

    @pytest.mark.parametrize("backend, native", [("minicard", True), ("minicard", False)])
    def test_at_most_violated(self, backend, native):
        with SatEngine(VariableAllocator(), backend=backend, native_cardinality=native) as engine:
            lits = list(engine.new_variables(4))
            engine.add_at_most(lits, 2)
            for lit in lits[:3]:
                engine.add_clause([lit])
            assert engine.is_satisfiable() is False

    @pytest.mark.parametrize("backend, native", [("minicard", True), ("minicard", False)])
    def test_at_least_violated(self, backend, native):
        with SatEngine(VariableAllocator(), backend=backend, native_cardinality=native) as engine:
            lits = list(engine.new_variables(4))
            engine.add_at_least(lits, 3)
            for lit in lits[:2]:
                engine.add_clause([-lit])
            assert engine.is_satisfiable() is False

    def test_encoded_cardinality_reserves_auxiliary_ids(self):
        allocator = VariableAllocator()
        with SatEngine(allocator, backend="glucose4") as engine:
            lits = list(engine.new_variables(6))
            engine.add_at_most(lits, 2)
            assert allocator.top > 6
            assert engine.n_cardinality == 1
            assert engine.new_variable() == allocator.top

    def test_trivial_bounds(self):
        with SatEngine(VariableAllocator()) as engine:
            lits = list(engine.new_variables(3))
            engine.add_at_least(lits, 0)
            engine.add_at_most(lits, 3)
            assert engine.n_clauses == 0
            assert engine.n_cardinality == 0
            with pytest.raises(ContradictionError):
                engine.add_at_least(lits, 4)
            with pytest.raises(ContradictionError):
                engine.add_at_most(lits, -1)

    def test_generous_deadline(self):
        with SatEngine(VariableAllocator()) as engine:
            x = engine.new_variable()
            engine.add_clause([x])
            assert engine.is_satisfiable(deadline=10.0)
            assert engine.model()[x]

    def test_deadline_expiry_raises(self):
        engine = SatEngine(VariableAllocator())
        engine.delete()
        engine._solver = _NeverDecides()
        with pytest.raises(SolveTimeoutError):
            engine.is_satisfiable(deadline=0.01)

    def test_deadline_interrupts_real_backend(self):
        with SatEngine(VariableAllocator(), backend="minicard") as engine:
            add_pigeonhole(engine, 12, 11)
            start = time()
            with pytest.raises(SolveTimeoutError):
                engine.is_satisfiable(deadline=0.5)
            assert time() - start < 10
            with pytest.raises(SolverStateError):
                engine.model()
