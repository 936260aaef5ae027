"""Step canônico: manifest.schema (v1).

Valida o documento parseado contra o schema composto a partir do registry.
Todas as violações são acumuladas e levantadas juntas em
`SchemaValidationError`; o estágio não para na primeira.

Valores ainda não hidratados (`${env:...}`, mapas por ambiente) são aceitos
no lugar de qualquer valor de configuração; a configuração final é validada
de forma estrita em `config.build`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from manifest_resolver.core.errors import Stage
from manifest_resolver.core.exceptions import SchemaValidationError
from manifest_resolver.core.hydration.hydrator import environment_names
from manifest_resolver.core.manifest.schema import compose_schema
from manifest_resolver.core.manifest.validator import validate_manifest_document
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.core.registry.catalog import default_registry
from manifest_resolver.core.registry.kinds import ComponentRegistry
from manifest_resolver.steps import artifacts


@dataclass
class ManifestSchemaStep(Step):
    id: str = "manifest.schema"
    kind: StepKind = StepKind.VALIDATE
    stage: str = Stage.SCHEMA.value
    depends_on: List[str] = None  # type: ignore[assignment]
    registry: ComponentRegistry = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["manifest.parse"]
        if self.registry is None:
            self.registry = default_registry()

    def run(self, ctx: ResolutionContext) -> StepResult:
        doc = ctx.get_artifact(artifacts.DOCUMENT)
        names = environment_names(
            doc,
            ctx.environment,
            ctx.setting("hydration", "environment_names", []),
        )
        schema = compose_schema(self.registry, names)

        violations = validate_manifest_document(doc, schema)
        if violations:
            ctx.log(step_id=self.id, level="error", message="schema violations found", count=len(violations))
            raise SchemaValidationError.collect(self.stage, violations)

        ctx.log(step_id=self.id, level="info", message="manifest matches composed schema")
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="manifest matches composed schema",
            metrics={"component_types": len(self.registry.types())},
        )
