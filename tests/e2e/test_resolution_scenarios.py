# tests/e2e/test_resolution_scenarios.py
"""
Testes end-to-end da resolução via `ManifestResolver`.

Cada cenário parte do texto de um manifest e percorre todos os estágios
canônicos pelo Engine, verificando o resultado público (`ResolutionResult`):
plano, erros e avisos.

Cenários:
    - A: manifest sem `complianceFramework`
    - B: worker lê uma fila
    - C: dois binds produzem a mesma variável de ambiente
    - D: `select:` sem candidato e com candidatos demais
    - E: supressão expirada em fedramp-high e em commercial

Limites explícitos:
    - Não executa síntese real (backend dry-run)
"""

import pytest

from manifest_resolver.core.errors import POLICY_OVERRIDE_APPLIED, SUPPRESSION_EXPIRED
from manifest_resolver.core.exceptions import ManifestResolutionError
from manifest_resolver.core.pipeline.types import StepStatus


HEADER = """\
service: orders
owner: team-orders
complianceFramework: {framework}
"""


def _manifest(body: str, framework: str = "commercial") -> str:
    return HEADER.format(framework=framework) + body


def _codes(result):
    return [e.code for e in result.errors]


# ---------------------------------------------------------------------------
# Cenários
# ---------------------------------------------------------------------------

def test_scenario_a_missing_compliance_framework(resolver):
    text = """\
service: orders
owner: team-orders
components:
  - name: requests-queue
    type: sqs-queue
"""
    result = resolver.resolve_text(text, "dev")

    assert not result.ok
    assert result.plan is None
    assert result.run.failed_step == "manifest.schema"
    [error] = result.errors
    assert error.code == "SCHEMA_VIOLATION"
    assert error.path == "$.complianceFramework"
    assert error.stage == "schema"
    assert result.run.steps["plan.assemble"].status == StepStatus.SKIPPED


def test_scenario_b_worker_reads_queue(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: requests-queue
    type: sqs-queue
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
    binds:
      - to: requests-queue
        capability: queue:sqs
        access: read
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)
    assert result.ok, result.errors

    worker = result.plan.component("worker")
    env_vars = worker.binding["envVars"]
    assert env_vars["QUEUE_URL"] == "https://sqs.us-east-1.amazonaws.com/000000000000/orders-requests-queue"

    actions = {a for policy in worker.binding["iamPolicies"] for a in policy["Action"]}
    assert "sqs:ReceiveMessage" in actions
    assert "sqs:SendMessage" not in actions
    assert worker.binds[0]["trace"]["state"] == "BOUND"
    assert result.plan.synthesis_order == [["requests-queue"], ["worker"]]


def test_scenario_c_duplicate_env_var(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: orders-db
    type: rds-postgres
  - name: audit-db
    type: rds-postgres
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
    binds:
      - to: orders-db
        capability: db:postgres
        access: read
      - to: audit-db
        capability: db:postgres
        access: read
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)

    assert result.run.failed_step == "binding.resolve"
    assert "DUPLICATE_ENVIRONMENT_VARIABLE" in _codes(result)
    dup = next(e for e in result.errors if e.code == "DUPLICATE_ENVIRONMENT_VARIABLE")
    assert dup.path == "$.components[2].binds[1].env"
    assert dup.stage == "binding"


@pytest.mark.parametrize(
    "databases, code",
    [
        ([], "SELECTOR_NO_MATCH"),
        (["db-a", "db-b"], "SELECTOR_MULTIPLE_MATCHES"),
    ],
)
def test_scenario_d_selector(resolver, as_of, databases, code):
    dbs = "".join(
        f"""\
  - name: {name}
    type: rds-postgres
    labels:
      shared: "true"
      env: qa
"""
        for name in databases
    )
    worker = """\
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
    binds:
      - select:
          type: rds-postgres
          withLabels:
            shared: "true"
            env: qa
        capability: db:postgres
        access: read
"""
    result = resolver.resolve_text(_manifest("components:\n" + dbs + worker), "dev", as_of=as_of)

    assert result.run.failed_step == "manifest.references"
    assert _codes(result) == [code]
    assert result.errors[0].path.startswith(f"$.components[{len(databases)}].binds[0]")


SUPPRESSED_QUEUE = """\
governance:
  cdkNag:
    suppress:
      - id: AwsSolutions-SQS3
        justification: DLQ handled by the consumer
        owner: team-orders
        expiresOn: "2020-01-01"
        appliesTo: [requests-queue]
components:
  - name: requests-queue
    type: sqs-queue
"""


def test_scenario_e_expired_suppression_fails_under_fedramp_high(resolver, as_of):
    result = resolver.resolve_text(_manifest(SUPPRESSED_QUEUE, "fedramp-high"), "prod", as_of=as_of)

    assert not result.ok
    assert result.plan is None
    assert _codes(result) == ["SUPPRESSION_INVALID"]
    assert result.errors[0].path == "$.governance.cdkNag.suppress[0].expiresOn"


def test_scenario_e_expired_suppression_warns_under_commercial(resolver, as_of):
    result = resolver.resolve_text(_manifest(SUPPRESSED_QUEUE, "commercial"), "prod", as_of=as_of)

    assert result.ok, result.errors
    assert [w.code for w in result.warnings] == [SUPPRESSION_EXPIRED]
    assert result.warnings[0].stage == "references"
    assert result.plan.deployable
    assert result.plan.warnings[0]["code"] == SUPPRESSION_EXPIRED
    assert result.plan.governance["suppressions"][0]["id"] == "AwsSolutions-SQS3"


# ---------------------------------------------------------------------------
# Propriedades
# ---------------------------------------------------------------------------

def test_resolution_is_idempotent(resolver, worker_manifest_yaml, as_of):
    """
    A mesma entrada produz bytes idênticos no plano e o mesmo log de eventos.
    """
    first = resolver.resolve_text(worker_manifest_yaml, "prod", as_of=as_of)
    second = resolver.resolve_text(worker_manifest_yaml, "prod", as_of=as_of)

    assert first.ok, first.errors
    assert first.plan.to_json() == second.plan.to_json()
    assert first.plan.plan_hash == second.plan.plan_hash
    assert first.events == second.events
    assert first.resolution_id == second.resolution_id


def test_environment_changes_the_plan(resolver, worker_manifest_yaml, as_of):
    dev = resolver.resolve_text(worker_manifest_yaml, "dev", as_of=as_of)
    prod = resolver.resolve_text(worker_manifest_yaml, "prod", as_of=as_of)

    assert dev.plan.component("worker").config["memorySize"] == 512
    assert prod.plan.component("worker").config["memorySize"] == 2048
    assert prod.plan.component("orders-db").config["instanceClass"] == "db.r6g.large"
    assert dev.resolution_id != prod.resolution_id


def test_plan_records_provenance_and_hashes(resolver, worker_manifest_yaml, as_of):
    plan = resolver.resolve_text(worker_manifest_yaml, "dev", as_of=as_of).plan
    queue = plan.component("requests-queue")
    assert queue.provenance["visibilityTimeout"] == "component"
    assert queue.provenance["fifo"] == "fallbacks"
    assert len(queue.config_hash) == 64
    assert "queue:sqs" in queue.capabilities
    assert plan.labels == {"costCenter": "1234"}


def test_policy_override_surfaces_as_warning(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: orders-db
    type: rds-postgres
    config:
      publiclyAccessible: true
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)

    assert result.ok, result.errors
    assert result.plan.component("orders-db").config["publiclyAccessible"] is False
    [w] = result.warnings
    assert w.code == POLICY_OVERRIDE_APPLIED
    assert w.path == "$.components[0].config.publiclyAccessible"


def test_refs_resolve_across_levels(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: api
    type: lambda-api
    config:
      handler: api.handler
      environmentVariables:
        WORKER: ${ref:worker.lambda:function.functionName}
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)

    assert result.ok, result.errors
    assert result.plan.synthesis_order == [["worker"], ["api"]]
    api = result.plan.component("api")
    assert api.config["environmentVariables"]["WORKER"] == "orders-worker"
    assert api.refs == {"${ref:worker.lambda:function.functionName}": "orders-worker"}


def test_ref_into_scalar_field_is_a_user_error(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: api
    type: lambda-api
    config:
      handler: api.handler
      environmentVariables:
        DBX: ${ref:orders-db.db:postgres.host.sub}
  - name: orders-db
    type: rds-postgres
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)

    assert result.run.failed_step == "binding.resolve"
    assert _codes(result) == ["REFERENCE_ERROR"]
    assert not result.has_internal_errors


def test_boolean_label_matches_string_selector(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: orders-db
    type: rds-postgres
    labels:
      shared: true
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
    binds:
      - select:
          type: rds-postgres
          withLabels:
            shared: "true"
        capability: db:postgres
        access: read
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)

    assert result.ok, result.errors
    assert result.plan.component("orders-db").labels == {"shared": "true"}


def test_bind_cycle_is_reported(resolver, as_of):
    text = _manifest(
        """\
components:
  - name: a
    type: lambda-api
    config: {handler: a.h}
    binds: [{to: b, capability: "lambda:function", access: write}]
  - name: b
    type: lambda-worker
    config: {handler: b.h}
    binds: [{to: a, capability: "lambda:function", access: write}]
"""
    )
    result = resolver.resolve_text(text, "dev", as_of=as_of)

    assert _codes(result) == ["CYCLIC_BINDING_DEPENDENCY"]
    assert result.run.failed_step == "binding.resolve"


def test_raise_for_errors(resolver, minimal_manifest_yaml, as_of):
    ok = resolver.resolve_text(minimal_manifest_yaml, "dev", as_of=as_of)
    ok.raise_for_errors()

    broken = resolver.resolve_text("service: [unclosed\n", "dev", as_of=as_of)
    assert _codes(broken) == ["PARSE_ERROR"]
    assert not broken.has_internal_errors
    with pytest.raises(ManifestResolutionError) as exc:
        broken.raise_for_errors()
    assert exc.value.issues == broken.errors


def test_to_dict_is_serializable(resolver, minimal_manifest_yaml, as_of):
    out = resolver.resolve_text(minimal_manifest_yaml, "dev", as_of=as_of).to_dict()
    assert out["ok"] is True
    assert out["errors"] == []
    assert out["plan"]["components"][0]["name"] == "requests-queue"


# ---------------------------------------------------------------------------
# Arquivos
# ---------------------------------------------------------------------------

def test_resolve_file_with_environments_ref(tmp_path, resolver, as_of):
    (tmp_path / "environments.yaml").write_text(
        "dev:\n  defaults:\n    retention: 7\nprod:\n  defaults:\n    retention: 90\n",
        encoding="utf-8",
    )
    manifest = tmp_path / "manifest.yaml"
    manifest.write_text(
        _manifest(
            """\
environments:
  $ref: environments.yaml
components:
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
      logRetentionDays: ${env:retention}
"""
        ),
        encoding="utf-8",
    )

    result = resolver.resolve_file(manifest, "prod", as_of=as_of)

    assert result.ok, result.errors
    assert result.plan.component("worker").config["logRetentionDays"] == 90
    assert result.events[0]["step_id"] == "manifest.parse"


def test_resolve_missing_file(tmp_path, resolver, as_of):
    result = resolver.resolve_file(tmp_path / "absent.yaml", "dev", as_of=as_of)

    assert not result.ok
    assert _codes(result) == ["MANIFEST_FILE_ERROR"]
    assert result.errors[0].stage == "parse"
    assert result.plan is None
