"""Step canônico: governance.validate (v1).

Valida as modificações via escape hatch (`patches[]` e `overrides` de
componente) e consolida o relatório de governança com as supressões já
verificadas em `manifest.references`.

Em fedramp-high, modificação sem aprovação registrada falha o estágio;
em fedramp-moderate vira aviso. O plano só é montado (e `deployable`)
quando este estágio passa.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from manifest_resolver.core.errors import Stage
from manifest_resolver.core.exceptions import StageFailure
from manifest_resolver.core.governance.validator import GovernanceReport, GovernanceValidator
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.steps import artifacts


@dataclass
class GovernanceValidateStep(Step):
    id: str = "governance.validate"
    kind: StepKind = StepKind.VALIDATE
    stage: str = Stage.GOVERNANCE.value
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["binding.resolve"]

    def run(self, ctx: ResolutionContext) -> StepResult:
        manifest = ctx.get_artifact(artifacts.MANIFEST)
        suppressions: GovernanceReport = ctx.get_artifact(artifacts.SUPPRESSIONS)

        patches = GovernanceValidator(as_of=ctx.as_of).check_patches(manifest)
        for issue in patches.warnings:
            ctx.add_warning(step_id=self.id, issue=issue)

        if patches.errors:
            ctx.log(
                step_id=self.id,
                level="error",
                message="plan is not deployable",
                framework=manifest.compliance_framework.value,
            )
            raise StageFailure.collect(self.stage, patches.errors)

        report = GovernanceReport(
            suppressions=list(suppressions.suppressions),
            patches=list(patches.patches),
            warnings=list(suppressions.warnings) + list(patches.warnings),
        )
        ctx.set_artifact(artifacts.GOVERNANCE, report)

        ctx.log(
            step_id=self.id,
            level="info",
            message="governance checks passed",
            patches=len(report.patches),
            suppressions=len(report.suppressions),
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="governance checks passed",
            metrics={
                "patches": len(report.patches),
                "suppressions": len(report.suppressions),
                "approved_patches": sum(1 for p in report.patches if p.approved),
            },
            payload={"deployable": report.deployable},
        )
