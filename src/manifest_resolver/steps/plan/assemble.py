"""Step canônico: plan.assemble (v1).

Monta o `ResolvedPlan` a partir dos artifacts dos estágios anteriores.

Por componente, a configuração registrada é a efetiva (com os `${ref}` já
substituídos) e o `configHash` é calculado sobre ela. Os avisos de todos os
estágios entram no plano na ordem em que foram emitidos.

Limites explícitos (v1):
- NÃO persiste o plano (ver `save_plan`)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

from manifest_resolver.core.config.hashing import compute_config_hash
from manifest_resolver.core.errors import Stage
from manifest_resolver.core.manifest.model import ComponentSpec
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.core.traceability.plan import ComponentPlan, ResolvedPlan
from manifest_resolver.steps import artifacts


def _binds(spec: ComponentSpec, binding) -> List[Dict[str, Any]]:
    traces = {t.bind_index: t for t in binding.traces}
    out: List[Dict[str, Any]] = []
    for directive in spec.binds:
        entry = directive.to_dict()
        trace = traces.get(directive.index)
        if trace is not None:
            entry["trace"] = trace.to_dict()
        out.append(entry)
    return out


@dataclass
class PlanAssembleStep(Step):
    id: str = "plan.assemble"
    kind: StepKind = StepKind.ASSEMBLE
    stage: str = Stage.PLAN.value
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["governance.validate"]

    def run(self, ctx: ResolutionContext) -> StepResult:
        manifest = ctx.get_artifact(artifacts.MANIFEST)
        configs = ctx.get_artifact(artifacts.CONFIGS)
        binding = ctx.get_artifact(artifacts.BINDING)
        governance = ctx.get_artifact(artifacts.GOVERNANCE)

        components: List[ComponentPlan] = []
        for spec in manifest.components:
            resolved = configs[spec.name]
            bound = binding.components[spec.name]
            components.append(
                ComponentPlan(
                    name=spec.name,
                    type=spec.type,
                    level=bound.level,
                    config=bound.effective_config,
                    provenance=dict(sorted(resolved.provenance.items())),
                    config_hash=compute_config_hash(bound.effective_config),
                    labels=dict(spec.labels),
                    binds=_binds(spec, bound),
                    binding=bound.result.to_dict(),
                    capabilities=bound.capabilities,
                    construct_handles=bound.construct_handles,
                    refs=dict(sorted(bound.ref_values.items())),
                    overrides=dict(spec.overrides),
                    policy=dict(spec.policy),
                )
            )

        plan = ResolvedPlan(
            service=manifest.service,
            owner=manifest.owner,
            environment=ctx.environment,
            compliance_framework=manifest.compliance_framework.value,
            components=components,
            synthesis_order=[list(level) for level in binding.levels],
            labels=dict(manifest.labels),
            governance=governance.to_dict(),
            warnings=[w.to_dict() for w in ctx.all_warnings()],
            deployable=governance.deployable,
        )
        ctx.set_artifact(artifacts.PLAN, plan)

        ctx.log(
            step_id=self.id,
            level="info",
            message="plan assembled",
            components=len(components),
            plan_hash=plan.plan_hash,
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="plan assembled",
            metrics={"components": len(components), "warnings": len(plan.warnings)},
            payload={"plan_hash": plan.plan_hash, "deployable": plan.deployable},
        )
