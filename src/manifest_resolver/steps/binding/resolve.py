"""Step canônico: binding.resolve (v1).

Resolve todos os binds em níveis topológicos, sintetiza cada componente
através do backend configurado e publica suas capabilities.

Sem backend explícito, usa o `DryRunSynthesizer` com `synthesis.region` e
`synthesis.account` dos settings.

Publica:
- `binding.report`: `BindingReport` (níveis, traces, resultados)
- `binding.capabilities`: `CapabilityRegistry` já congelado
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from manifest_resolver.core.binding.capabilities import CapabilityRegistry
from manifest_resolver.core.binding.registry import BinderRegistry, default_binder_registry
from manifest_resolver.core.binding.resolver import BinderResolver
from manifest_resolver.core.errors import Stage
from manifest_resolver.core.exceptions import StageFailure
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.core.registry.catalog import default_registry
from manifest_resolver.core.registry.kinds import ComponentRegistry
from manifest_resolver.steps import artifacts
from manifest_resolver.synthesis.backend import SynthesisBackend
from manifest_resolver.synthesis.dry_run import DryRunSynthesizer


@dataclass
class BindingResolveStep(Step):
    id: str = "binding.resolve"
    kind: StepKind = StepKind.RESOLVE
    stage: str = Stage.BINDING.value
    depends_on: List[str] = None  # type: ignore[assignment]
    registry: ComponentRegistry = None  # type: ignore[assignment]
    binders: BinderRegistry = None  # type: ignore[assignment]
    backend: Optional[SynthesisBackend] = None

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["config.build"]
        if self.registry is None:
            self.registry = default_registry()
        if self.binders is None:
            self.binders = default_binder_registry()

    def run(self, ctx: ResolutionContext) -> StepResult:
        manifest = ctx.get_artifact(artifacts.MANIFEST)
        references = ctx.get_artifact(artifacts.REFERENCES)
        configs = ctx.get_artifact(artifacts.CONFIGS)

        region = ctx.setting("synthesis", "region", "us-east-1")
        account = str(ctx.setting("synthesis", "account", "000000000000"))
        backend = self.backend or DryRunSynthesizer(self.registry, region=region, account=account)

        resolver = BinderResolver(
            self.binders,
            backend,
            region=region,
            account=account,
            max_workers=ctx.setting("engine", "max_workers"),
        )
        capabilities = CapabilityRegistry()
        report = resolver.resolve(
            manifest,
            ctx.environment,
            references.targets,
            references.refs,
            configs,
            capabilities=capabilities,
        )
        if not report.ok:
            raise StageFailure.collect(self.stage, report.errors)

        ctx.set_artifact(artifacts.BINDING, report)
        ctx.set_artifact(artifacts.CAPABILITIES, capabilities)

        binds = sum(len(b.traces) for b in report.components.values())
        for level_index, level in enumerate(report.levels):
            ctx.log(step_id=self.id, level="debug", message="level synthesized", level_index=level_index, components=level)
        ctx.log(
            step_id=self.id,
            level="info",
            message="binds resolved",
            levels=len(report.levels),
            binds=binds,
            capabilities=len(capabilities),
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"{binds} bind(s) resolved in {len(report.levels)} level(s)",
            metrics={"levels": len(report.levels), "binds": binds, "capabilities": len(capabilities)},
            payload={"synthesis_order": [list(level) for level in report.levels]},
        )
