"""
Tests for the in-memory repository.
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(__file__))))

from engine.models import Calculation, Constant, Formula
from engine.repository import InMemoryRepository, Repository
from engine.seed_data import SEED_CONSTANTS, SEED_FORMULAS


def _calc(calc_id, formula_id, timestamp):
    return Calculation(id=calc_id, formula_id=formula_id, inputs="{}", result=1.0, timestamp=timestamp)


@pytest.fixture
def repo():
    return InMemoryRepository(seed=False)


class TestSeed:

    def test_seeded_by_default(self):
        repo = InMemoryRepository()
        assert len(repo.list_formulas()) == len(SEED_FORMULAS)
        assert len(repo.list_constants()) == len(SEED_CONSTANTS)
        assert repo.get_formula("ohms-law-voltage").expression == "I * R"
        assert repo.get_constant("speed-of-light").symbol == "c"

    def test_empty_without_seed(self, repo):
        assert repo.list_formulas() == []
        assert repo.list_constants() == []


class TestFormulas:

    def test_create_assigns_id(self, repo):
        created = repo.create_formula(Formula(id="ignored", name="Gain", expression="Vo / Vi",
                                              category="Amplifiers", variables=["Vo", "Vi"]))
        assert created.id != "ignored"
        assert repo.get_formula(created.id) == created

    def test_update(self, repo):
        created = repo.create_formula(Formula(id="", name="A", expression="x", category="T", variables=["x"]))
        updated = repo.update_formula(created.id, Formula(id="", name="B", expression="2 * x",
                                                          category="T", variables=["x"]))
        assert updated.id == created.id
        assert repo.get_formula(created.id).name == "B"

    def test_update_missing(self, repo):
        assert repo.update_formula("nope", Formula(id="", name="A", expression="x", category="T")) is None

    def test_delete(self, repo):
        created = repo.create_formula(Formula(id="", name="A", expression="x", category="T", variables=["x"]))
        assert repo.delete_formula(created.id) is True
        assert repo.get_formula(created.id) is None
        assert repo.delete_formula(created.id) is False

    def test_stored_variables_are_copied(self, repo):
        variables = ["x"]
        created = repo.create_formula(Formula(id="", name="A", expression="x", category="T", variables=variables))
        variables.append("y")
        assert repo.get_formula(created.id).variables == ["x"]


class TestConstants:

    def test_crud(self, repo):
        created = repo.create_constant(Constant(id="", name="Planck", symbol="h",
                                                value=6.62607015e-34, unit="J·s"))
        assert repo.get_constant(created.id).value == 6.62607015e-34

        updated = repo.update_constant(created.id, Constant(id="", name="Planck", symbol="h",
                                                            value=6.626e-34, unit="J·s"))
        assert updated.value == 6.626e-34
        assert repo.delete_constant(created.id) is True
        assert repo.list_constants() == []

    def test_update_missing(self, repo):
        assert repo.update_constant("nope", Constant(id="", name="X", symbol="x", value=1.0, unit="")) is None


class TestCalculations:

    def test_newest_first(self, repo):
        repo.add_calculation(_calc("a", "f1", "2024-01-01T00:00:00"))
        repo.add_calculation(_calc("b", "f1", "2024-01-03T00:00:00"))
        repo.add_calculation(_calc("c", "f2", "2024-01-02T00:00:00"))

        assert [c.id for c in repo.list_calculations()] == ["b", "c", "a"]

    def test_equal_timestamps_latest_insert_first(self, repo):
        repo.add_calculation(_calc("a", "f1", "2024-01-01T00:00:00"))
        repo.add_calculation(_calc("b", "f1", "2024-01-01T00:00:00"))
        assert [c.id for c in repo.list_calculations()] == ["b", "a"]

    def test_pagination(self, repo):
        for i in range(5):
            repo.add_calculation(_calc(str(i), "f", f"2024-01-0{i + 1}T00:00:00"))

        assert [c.id for c in repo.list_calculations(limit=2)] == ["4", "3"]
        assert [c.id for c in repo.list_calculations(limit=2, offset=2)] == ["2", "1"]
        assert [c.id for c in repo.list_calculations(offset=4)] == ["0"]

    def test_filter_by_formula(self, repo):
        repo.add_calculation(_calc("a", "f1", "2024-01-01T00:00:00"))
        repo.add_calculation(_calc("b", "f2", "2024-01-02T00:00:00"))

        assert [c.id for c in repo.list_calculations(formula_ids=["f1"])] == ["a"]
        assert repo.count_calculations(formula_ids=["f1"]) == 1
        assert repo.count_calculations(formula_ids=[]) == 0
        assert repo.count_calculations() == 2

    def test_append_is_add(self, repo):
        calc = _calc("a", "f1", "2024-01-01T00:00:00")
        assert repo.append(calc) is calc
        assert repo.list_calculations() == [calc]

    def test_clear(self, repo):
        repo.add_calculation(_calc("a", "f1", "2024-01-01T00:00:00"))
        repo.add_calculation(_calc("b", "f1", "2024-01-02T00:00:00"))
        assert repo.clear_calculations() == 2
        assert repo.list_calculations() == []

    def test_history_survives_formula_delete(self):
        repo = InMemoryRepository()
        repo.add_calculation(_calc("a", "ohms-law-voltage", "2024-01-01T00:00:00"))
        repo.delete_formula("ohms-law-voltage")
        assert repo.list_calculations()[0].formula_id == "ohms-law-voltage"


class TestRepositoryContract:

    def test_seed_is_abstract(self):
        assert "seed" in Repository.__abstractmethods__
        assert getattr(Repository.seed, "__isabstractmethod__", False)

    def test_implementations_provide_seed(self):
        assert InMemoryRepository.seed is not Repository.seed
