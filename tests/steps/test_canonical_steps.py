# tests/steps/test_canonical_steps.py
"""
Testes dos estágios canônicos executados um a um sobre o mesmo contexto.

Cada estágio lê apenas artifacts publicados pelos anteriores; estes testes
percorrem a cadeia inteira sem o Engine, verificando o que cada estágio
publica e como falha.

Limites explícitos:
    - A ordem de execução e a política fail-fast são testadas em tests/core/engine
"""

import pytest

from manifest_resolver.core.exceptions import SchemaValidationError, StageFailure
from manifest_resolver.core.pipeline.types import StepStatus
from manifest_resolver.core.traceability.plan import ResolvedPlan
from manifest_resolver.steps import artifacts, default_steps


def _run_until(ctx, last_id):
    results = {}
    for step in default_steps():
        results[step.id] = step.run(ctx)
        if step.id == last_id:
            break
    return results


def test_parse_publishes_document(ctx_factory, worker_manifest_yaml):
    ctx = ctx_factory(worker_manifest_yaml)
    results = _run_until(ctx, "manifest.parse")

    doc = ctx.get_artifact(artifacts.DOCUMENT)
    assert doc["service"] == "orders"
    assert results["manifest.parse"].metrics["components"] == 3
    assert results["manifest.parse"].payload == {"preloaded": False}


def test_parse_keeps_preloaded_document(ctx_factory):
    ctx = ctx_factory("")
    ctx.set_artifact(artifacts.DOCUMENT, {"service": "orders", "components": []})
    results = _run_until(ctx, "manifest.parse")
    assert results["manifest.parse"].payload == {"preloaded": True}


def test_schema_failure_collects_violations(ctx_factory):
    ctx = ctx_factory("service: orders\nowner: team\ncomponents: []\n")
    with pytest.raises(SchemaValidationError) as exc:
        _run_until(ctx, "manifest.schema")
    paths = [e.path for e in exc.value.errors]
    assert "$.complianceFramework" in paths
    assert not ctx.has_artifact(artifacts.MANIFEST)


def test_hydrate_selects_environment(ctx_factory, worker_manifest_yaml):
    ctx = ctx_factory(worker_manifest_yaml, environment="prod")
    _run_until(ctx, "manifest.hydrate")

    manifest = ctx.get_artifact(artifacts.MANIFEST)
    worker = manifest.component("worker")
    assert worker.config["memorySize"] == 2048
    assert worker.config["vpc"] == {"enabled": True}
    assert manifest.component("orders-db").config["instanceClass"] == "db.r6g.large"
    assert ctx.get_artifact(artifacts.REFS) == []


def test_hydrate_failure_names_every_token(ctx_factory, minimal_manifest_yaml):
    text = minimal_manifest_yaml + "    config:\n      visibilityTimeout: ${env:missing}\n"
    ctx = ctx_factory(text)
    with pytest.raises(StageFailure) as exc:
        _run_until(ctx, "manifest.hydrate")
    [error] = exc.value.errors
    assert error.code == "HYDRATION_ERROR"
    assert error.path == "$.components[0].config.visibilityTimeout"


def test_references_publish_targets(ctx_factory, worker_manifest_yaml):
    ctx = ctx_factory(worker_manifest_yaml)
    results = _run_until(ctx, "manifest.references")

    report = ctx.get_artifact(artifacts.REFERENCES)
    assert sorted(report.targets.values()) == ["orders-db", "requests-queue"]
    assert results["manifest.references"].metrics["binds"] == 2
    assert ctx.get_artifact(artifacts.SUPPRESSIONS).suppressions == []


def test_config_build_resolves_every_component(ctx_factory, worker_manifest_yaml):
    ctx = ctx_factory(worker_manifest_yaml)
    results = _run_until(ctx, "config.build")

    configs = ctx.get_artifact(artifacts.CONFIGS)
    assert list(configs) == ["requests-queue", "orders-db", "worker"]
    assert configs["worker"].config["memorySize"] == 512
    assert configs["worker"].provenance["memorySize"] == "component"
    assert configs["requests-queue"].config["visibilityTimeout"] == 120
    assert results["config.build"].payload["hashes"]["worker"] == configs["worker"].config_hash


def test_config_build_rejects_invalid_effective_values(ctx_factory):
    """
    Um valor vindo de `${env:}` só é conhecido após a hidratação; a validação
    estrita pós-merge o rejeita em `config.build`, não em `manifest.schema`.
    """
    text = """\
service: orders
owner: team-orders
complianceFramework: commercial
environments:
  dev:
    defaults:
      visibility: 99999999
components:
  - name: requests-queue
    type: sqs-queue
    config:
      visibilityTimeout: ${env:visibility}
"""
    ctx = ctx_factory(text)
    with pytest.raises(StageFailure) as exc:
        _run_until(ctx, "config.build")
    assert not isinstance(exc.value, SchemaValidationError)
    assert [e.path for e in exc.value.errors] == ["$.components[0].config.visibilityTimeout"]


def test_binding_resolve_publishes_levels(ctx_factory, worker_manifest_yaml):
    ctx = ctx_factory(worker_manifest_yaml)
    results = _run_until(ctx, "binding.resolve")

    report = ctx.get_artifact(artifacts.BINDING)
    assert report.levels == [["requests-queue", "orders-db"], ["worker"]]
    assert results["binding.resolve"].metrics["binds"] == 2
    assert ctx.get_artifact(artifacts.CAPABILITIES).frozen
    env_vars = report.components["worker"].result.env_vars
    assert "DB_HOST" in env_vars
    assert "QUEUE_URL" in env_vars


def test_governance_and_plan(ctx_factory, worker_manifest_yaml):
    ctx = ctx_factory(worker_manifest_yaml)
    results = _run_until(ctx, "plan.assemble")

    assert all(r.status == StepStatus.SUCCESS for r in results.values())
    assert ctx.get_artifact(artifacts.GOVERNANCE).deployable
    plan = ctx.get_artifact(artifacts.PLAN)
    assert isinstance(plan, ResolvedPlan)
    assert plan.environment == "dev"
    assert [c.name for c in plan.components] == ["requests-queue", "orders-db", "worker"]
    assert plan.component("worker").level == 1
    assert results["plan.assemble"].payload["plan_hash"] == plan.plan_hash


def test_governance_blocks_unapproved_override_under_fedramp_high(ctx_factory):
    text = """\
service: orders
owner: team-orders
complianceFramework: fedramp-high
components:
  - name: orders-db
    type: rds-postgres
    overrides:
      instance.storageType: io2
"""
    ctx = ctx_factory(text)
    with pytest.raises(StageFailure) as exc:
        _run_until(ctx, "governance.validate")
    assert [e.code for e in exc.value.errors] == ["GOVERNANCE_APPROVAL_REQUIRED"]
    assert not ctx.has_artifact(artifacts.GOVERNANCE)
