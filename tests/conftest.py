# tests/conftest.py
"""
Fixtures compartilhados para os testes do Manifest Resolver.

Fornecem:
- manifests mínimos e completos como strings YAML (sem I/O)
- registries padrão (tipos de componente e estratégias de bind)
- uma data de referência fixa para prazos de governança
- um `ResolutionContext` determinístico
- um Step dummy (duck typing) para testes estruturais do engine

Invariantes:
    - Nenhuma fixture acessa filesystem, rede ou relógio
    - Dados retornados são novos a cada teste (sem estado compartilhado)
"""

from datetime import date

import pytest


AS_OF = date(2026, 1, 16)


MINIMAL_MANIFEST = """\
service: orders
owner: team-orders
complianceFramework: commercial
components:
  - name: requests-queue
    type: sqs-queue
"""


WORKER_MANIFEST = """\
service: orders
owner: team-orders
complianceFramework: commercial
environments:
  dev:
    defaults:
      logRetentionDays: 7
      memory: 512
  prod:
    defaults:
      logRetentionDays: 30
      memory: 2048
labels:
  costCenter: "1234"
components:
  - name: requests-queue
    type: sqs-queue
    config:
      visibilityTimeout: 120
  - name: orders-db
    type: rds-postgres
    labels:
      shared: "true"
    config:
      dbName: orders
      instanceClass:
        dev: db.t3.micro
        prod: db.r6g.large
  - name: worker
    type: lambda-worker
    config:
      handler: worker.handler
      memorySize: ${env:memory}
      environmentVariables:
        STAGE: "${env:logRetentionDays}-days"
      vpc:
        enabled: ${envIs:prod}
    binds:
      - to: requests-queue
        capability: queue:sqs
        access: read
      - select:
          type: rds-postgres
          withLabels:
            shared: "true"
        capability: db:postgres
        access: readwrite
"""


@pytest.fixture
def as_of() -> date:
    """Data de referência fixa para expiração de supressões."""
    return AS_OF


@pytest.fixture
def minimal_manifest_yaml() -> str:
    return MINIMAL_MANIFEST


@pytest.fixture
def worker_manifest_yaml() -> str:
    """
    Manifest realista com fila, banco e worker.

    Exercita `${env:}`, `${envIs:}`, mapas por ambiente, `to:` e `select:`.
    """
    return WORKER_MANIFEST


@pytest.fixture
def registry():
    from manifest_resolver.core.registry.catalog import default_registry

    return default_registry()


@pytest.fixture
def binders():
    from manifest_resolver.core.binding.registry import default_binder_registry

    return default_binder_registry()


@pytest.fixture
def settings() -> dict:
    """Settings efetivos com pool sequencial (ordem de log previsível)."""
    from manifest_resolver.core.config.loader import load_settings

    return load_settings(overrides={"engine": {"max_workers": 1}})


@pytest.fixture
def resolver(registry, settings):
    from manifest_resolver.resolver import ManifestResolver

    return ManifestResolver(registry=registry, settings=settings)


@pytest.fixture
def ctx_factory(settings, as_of):
    """Factory de `ResolutionContext` isolado por chamada."""
    from manifest_resolver.core.pipeline.context import ResolutionContext

    def make(text: str = "", environment: str = "dev", **overrides):
        return ResolutionContext(
            resolution_id="res-test-001",
            environment=environment,
            settings=overrides.pop("settings", settings),
            as_of=overrides.pop("as_of", as_of),
            text=text,
            meta={"source": "pytest"},
        )

    return make


@pytest.fixture
def dummy_ctx(ctx_factory):
    return ctx_factory()


@pytest.fixture
def DummyStep():
    """
    Classe de Step mínima (duck typing, sem herança).

    Sempre grava `<id>.ok` no contexto e devolve SUCCESS.
    """
    from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus

    class _DummyStep:
        def __init__(self, step_id: str = "manifest.parse", kind: StepKind = StepKind.VALIDATE, depends_on=None):
            self.id = step_id
            self.kind = kind
            self.stage = "engine"
            self.depends_on = depends_on or []

        def run(self, ctx):
            ctx.set_artifact(f"{self.id}.ok", True)
            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="dummy ok",
                payload={"note": "dummy"},
            )

    return _DummyStep


@pytest.fixture
def build_manifest():
    """Constrói um `Manifest` a partir de um dict (sem schema nem hidratação)."""
    from manifest_resolver.core.manifest.model import Manifest

    def make(components, framework: str = "commercial", **extra):
        doc = {
            "service": "orders",
            "owner": "team-orders",
            "complianceFramework": framework,
            "components": components,
        }
        doc.update(extra)
        return Manifest.from_dict(doc)

    return make
