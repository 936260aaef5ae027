"""Step canônico: manifest.hydrate (v1).

Resolve a interpolação dos blocos de componente para o ambiente alvo e
constrói o modelo interno (`Manifest`).

Publica:
- `manifest.hydrated`: documento hidratado
- `manifest.refs`: ocorrências de `${ref:...}` (resolvidas só no binding)
- `manifest.model`: `Manifest` construído do documento hidratado
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from manifest_resolver.core.errors import Stage
from manifest_resolver.core.exceptions import StageFailure
from manifest_resolver.core.hydration.hydrator import ContextHydrator
from manifest_resolver.core.manifest.model import Manifest
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.steps import artifacts


@dataclass
class ManifestHydrateStep(Step):
    id: str = "manifest.hydrate"
    kind: StepKind = StepKind.TRANSFORM
    stage: str = Stage.HYDRATION.value
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["manifest.schema"]

    def run(self, ctx: ResolutionContext) -> StepResult:
        doc = ctx.get_artifact(artifacts.DOCUMENT)
        hydrator = ContextHydrator(
            ctx.environment,
            well_known_environments=ctx.setting("hydration", "environment_names", []),
        )
        result = hydrator.hydrate(doc)
        if not result.ok:
            raise StageFailure.collect(self.stage, result.errors)

        manifest = Manifest.from_dict(result.document)
        ctx.set_artifact(artifacts.HYDRATED, result.document)
        ctx.set_artifact(artifacts.REFS, list(result.refs))
        ctx.set_artifact(artifacts.MANIFEST, manifest)

        ctx.log(
            step_id=self.id,
            level="info",
            message="manifest hydrated",
            environment=ctx.environment,
            refs=len(result.refs),
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"manifest hydrated for environment '{ctx.environment}'",
            metrics={"components": len(manifest.components), "refs": len(result.refs)},
        )
