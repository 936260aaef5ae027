"""Step canônico: manifest.references (v1).

Validação semântica do manifest hidratado:
- nomes únicos, alvos de `to:`/`select:` e `${ref:...}`
- completude das supressões de governança (`governance.cdkNag.suppress`)

Erros das duas verificações são acumulados e o estágio falha uma única vez.
Supressões expiradas ou a expirar viram avisos (exceto em fedramp-high,
onde expirada é erro).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from manifest_resolver.core.errors import Stage
from manifest_resolver.core.exceptions import StageFailure
from manifest_resolver.core.governance.validator import GovernanceValidator
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.core.references.validator import ReferenceValidator
from manifest_resolver.core.registry.catalog import default_registry
from manifest_resolver.core.registry.kinds import ComponentRegistry
from manifest_resolver.steps import artifacts


@dataclass
class ManifestReferencesStep(Step):
    id: str = "manifest.references"
    kind: StepKind = StepKind.VALIDATE
    stage: str = Stage.REFERENCES.value
    depends_on: List[str] = None  # type: ignore[assignment]
    registry: ComponentRegistry = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["manifest.hydrate"]
        if self.registry is None:
            self.registry = default_registry()

    def run(self, ctx: ResolutionContext) -> StepResult:
        manifest = ctx.get_artifact(artifacts.MANIFEST)
        refs = ctx.get_artifact(artifacts.REFS)

        report = ReferenceValidator(self.registry).validate(manifest, refs)
        governance = GovernanceValidator(
            as_of=ctx.as_of,
            expiry_warning_days=int(ctx.setting("governance", "expiry_warning_days", 30)),
        ).check_suppressions(manifest)

        for issue in governance.warnings:
            ctx.add_warning(step_id=self.id, issue=issue)

        errors = report.errors + governance.errors
        if errors:
            raise StageFailure.collect(self.stage, errors)

        ctx.set_artifact(artifacts.REFERENCES, report)
        ctx.set_artifact(artifacts.SUPPRESSIONS, governance)

        ctx.log(
            step_id=self.id,
            level="info",
            message="references resolved",
            binds=len(report.targets),
            suppressions=len(governance.suppressions),
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="references resolved",
            metrics={
                "binds": len(report.targets),
                "refs": sum(len(v) for v in report.refs.values()),
                "suppressions": len(governance.suppressions),
            },
        )
