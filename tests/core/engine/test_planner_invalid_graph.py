# tests/core/engine/test_planner_invalid_graph.py
"""
Testes de grafos de estágios inválidos.

Erros de planejamento são de configuração da plataforma e são `ValueError`.
"""

import pytest

from manifest_resolver.core.engine.planner import CycleDetectedError, UnknownDependencyError, plan_execution


def test_unknown_dependency(DummyStep):
    with pytest.raises(UnknownDependencyError):
        plan_execution([DummyStep("a", depends_on=["ghost"])])


def test_cycle(DummyStep):
    with pytest.raises(CycleDetectedError) as exc:
        plan_execution([DummyStep("a", depends_on=["b"]), DummyStep("b", depends_on=["a"]), DummyStep("c")])
    assert "['a', 'b']" in str(exc.value)


def test_duplicate_and_empty_ids(DummyStep):
    with pytest.raises(ValueError):
        plan_execution([DummyStep("a"), DummyStep("a")])
    with pytest.raises(ValueError):
        plan_execution([DummyStep(" ")])
