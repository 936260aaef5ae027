# tests/core/engine/test_executor_happy_path.py
"""
Testes do caminho feliz do Engine.

Invariantes:
    - todo estágio roda exatamente uma vez, na ordem planejada
    - avisos registrados no contexto são anexados ao `StepResult`
    - o log de eventos é determinístico (sequência, sem horário)
"""

from manifest_resolver.core.engine.engine import Engine
from manifest_resolver.core.errors import POLICY_OVERRIDE_APPLIED, Stage, warning
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus


class _WarningStep:
    id = "config.build"
    kind = StepKind.RESOLVE
    stage = "config"
    depends_on = ["manifest.parse"]

    def run(self, ctx):
        ctx.add_warning(
            step_id=self.id,
            issue=warning(stage=Stage.CONFIG, path="$.components[0].config.x", message="forced", code=POLICY_OVERRIDE_APPLIED),
        )
        return StepResult(step_id=self.id, kind=self.kind, status=StepStatus.SUCCESS, summary="ok")


def test_runs_all_steps_in_order(dummy_ctx, DummyStep):
    steps = [DummyStep("plan.assemble", depends_on=["config.build"]), _WarningStep(), DummyStep("manifest.parse")]

    result = Engine(steps=steps, ctx=dummy_ctx).run()

    assert result.ok
    assert list(result.steps) == ["manifest.parse", "config.build", "plan.assemble"]
    assert all(r.status == StepStatus.SUCCESS for r in result.steps.values())
    assert dummy_ctx.get_artifact("plan.assemble.ok") is True


def test_context_warnings_are_attached(dummy_ctx, DummyStep):
    result = Engine(steps=[DummyStep("manifest.parse"), _WarningStep()], ctx=dummy_ctx).run()
    assert [w.code for w in result.warnings] == [POLICY_OVERRIDE_APPLIED]
    assert result.steps["config.build"].warnings[0].severity == "warning"
    assert result.errors == []


def test_event_log_is_sequenced(dummy_ctx, DummyStep):
    Engine(steps=[DummyStep("manifest.parse")], ctx=dummy_ctx).run()
    assert [e["seq"] for e in dummy_ctx.events] == [0, 1]
    assert [e["message"] for e in dummy_ctx.events] == ["stage started", "stage finished"]
    assert all(e["resolution_id"] == "res-test-001" for e in dummy_ctx.events)
    assert all("ts" not in e for e in dummy_ctx.events)


def test_invalid_graph_becomes_configuration_error(dummy_ctx, DummyStep):
    result = Engine(steps=[DummyStep("a", depends_on=["ghost"])], ctx=dummy_ctx).run()
    assert not result.ok
    assert [e.code for e in result.configuration_errors] == ["ENGINE_CONFIGURATION_ERROR"]
    assert result.configuration_errors[0].details["exc_type"] == "UnknownDependencyError"
    assert result.steps == {}
