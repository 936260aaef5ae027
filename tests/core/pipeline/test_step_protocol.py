# tests/core/pipeline/test_step_protocol.py
"""
Testes do protocolo de Step.

Os testes asseguram que:
- Steps não precisam herdar de uma classe base concreta
- a conformidade é verificada via `typing.Protocol` com `@runtime_checkable`
- todos os estágios canônicos satisfazem o protocolo

Limites explícitos:
    - Não valida a lógica de domínio dos estágios
"""

import pytest

try:
    from manifest_resolver.core.pipeline.step import Step
    from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
    from manifest_resolver.steps import default_steps
except Exception as e:  # noqa: BLE001
    Step = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing pipeline contracts. Implement:\n"
            "- src/manifest_resolver/core/pipeline/step.py (Step)\n"
            "- src/manifest_resolver/core/pipeline/types.py (StepKind, StepResult, StepStatus)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_duck_typed_step_conforms(DummyStep, dummy_ctx):
    _require_imports()
    step = DummyStep("manifest.parse")
    assert isinstance(step, Step)

    result = step.run(dummy_ctx)
    assert isinstance(result, StepResult)
    assert result.status == StepStatus.SUCCESS
    assert result.kind == StepKind.VALIDATE


def test_object_without_run_does_not_conform():
    _require_imports()

    class _NoRun:
        id = "x"
        kind = StepKind.VALIDATE
        stage = "engine"
        depends_on = []

    assert not isinstance(_NoRun(), Step)


def test_canonical_steps_conform():
    _require_imports()
    steps = default_steps()
    assert all(isinstance(s, Step) for s in steps)
    assert len({s.id for s in steps}) == len(steps)
    assert {s.stage for s in steps} == {
        "parse", "schema", "hydration", "references", "config", "binding", "governance", "plan",
    }


def test_step_result_is_frozen():
    _require_imports()
    r = StepResult(step_id="a", kind=StepKind.RESOLVE, status=StepStatus.SUCCESS, summary="ok")
    with pytest.raises(Exception):
        r.status = StepStatus.FAILED  # type: ignore[misc]
    assert r.metrics == {} and r.warnings == [] and r.errors == [] and r.payload == {}
