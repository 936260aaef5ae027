# tests/core/pipeline/test_resolution_context.py
"""
Testes do ResolutionContext.

Os testes asseguram que:
- o artifact store é explícito (`KeyError` para chave ausente)
- `setting` lê seções dos settings com default
- eventos têm sequência monotônica e o id da resolução
- avisos são agrupados por estágio
- contextos distintos não compartilham estado
"""

import pytest

from manifest_resolver.core.errors import SUPPRESSION_EXPIRING, Stage, warning


def test_artifacts_round_trip(dummy_ctx):
    assert not dummy_ctx.has_artifact("manifest.model")
    dummy_ctx.set_artifact("manifest.model", {"service": "orders"})
    assert dummy_ctx.has_artifact("manifest.model")
    assert dummy_ctx.get_artifact("manifest.model") == {"service": "orders"}


def test_missing_artifact_raises(dummy_ctx):
    with pytest.raises(KeyError):
        dummy_ctx.get_artifact("plan")


def test_setting_reads_sections(ctx_factory):
    ctx = ctx_factory(settings={"engine": {"fail_fast": False}, "governance": "not-a-section"})
    assert ctx.setting("engine", "fail_fast") is False
    assert ctx.setting("engine", "max_workers", 4) == 4
    assert ctx.setting("governance", "expiry_warning_days", 30) == 30
    assert ctx.setting("missing", "key") is None


def test_log_appends_sequenced_events(dummy_ctx):
    dummy_ctx.log(step_id="manifest.parse", level="info", message="stage started")
    dummy_ctx.log(step_id="manifest.parse", level="info", message="stage finished", summary="ok")

    first, second = dummy_ctx.events
    assert first == {
        "resolution_id": "res-test-001",
        "seq": 0,
        "step_id": "manifest.parse",
        "level": "info",
        "message": "stage started",
    }
    assert second["seq"] == 1
    assert second["summary"] == "ok"


def test_warnings_grouped_by_step(dummy_ctx):
    w1 = warning(stage=Stage.REFERENCES, path="$.suppressions[0]", message="expiring", code=SUPPRESSION_EXPIRING)
    w2 = warning(stage=Stage.REFERENCES, path="$.suppressions[1]", message="expiring", code=SUPPRESSION_EXPIRING)
    dummy_ctx.add_warning(step_id="manifest.references", issue=w1)
    dummy_ctx.add_warning(step_id="manifest.references", issue=w2)

    assert dummy_ctx.warnings == {"manifest.references": [w1, w2]}
    assert dummy_ctx.all_warnings() == [w1, w2]


def test_contexts_are_isolated(ctx_factory):
    a = ctx_factory()
    b = ctx_factory(environment="prod")
    a.set_artifact("k", 1)
    a.log(step_id="s", level="info", message="m")
    assert not b.has_artifact("k")
    assert b.events == []
    assert b.environment == "prod"
