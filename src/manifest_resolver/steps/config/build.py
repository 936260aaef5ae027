"""Step canônico: config.build (v1).

Resolve a configuração final de cada componente (merge das cinco camadas)
e a valida de forma estrita contra o schema do tipo.

Execução:
- um `ConfigBuilder.resolve` por componente, em paralelo (fan-out com
  barreira); a saída segue a ordem de declaração do manifest
- a validação estrita ignora as posições onde ainda há um `${ref:...}`
  pendente; esses valores só existem depois do binding
- overrides de política que substituem valores do componente viram avisos

Publica `config.resolved`: nome do componente → `ResolvedConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Set

from manifest_resolver.core.config.builder import BuildContext, ConfigBuilder, ResolvedConfig
from manifest_resolver.core.engine.parallel import fan_out
from manifest_resolver.core.errors import Stage
from manifest_resolver.core.exceptions import ManifestException, StageFailure
from manifest_resolver.core.governance.policy import policy_overrides_for
from manifest_resolver.core.manifest.model import ComponentSpec
from manifest_resolver.core.manifest.schema import config_validation_schema
from manifest_resolver.core.manifest.validator import collect_violations
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.core.registry.catalog import default_registry
from manifest_resolver.core.registry.kinds import ComponentRegistry
from manifest_resolver.steps import artifacts


def _pending_ref_paths(report, component: str) -> Set[str]:
    return {occurrence.path for occurrence, _ in report.refs.get(component, [])}


def _under(path: str, prefixes: Set[str]) -> bool:
    return any(path == p or path.startswith(p + ".") or path.startswith(p + "[") for p in prefixes)


@dataclass
class ConfigBuildStep(Step):
    id: str = "config.build"
    kind: StepKind = StepKind.RESOLVE
    stage: str = Stage.CONFIG.value
    depends_on: List[str] = None  # type: ignore[assignment]
    registry: ComponentRegistry = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = ["manifest.references"]
        if self.registry is None:
            self.registry = default_registry()

    def run(self, ctx: ResolutionContext) -> StepResult:
        manifest = ctx.get_artifact(artifacts.MANIFEST)
        references = ctx.get_artifact(artifacts.REFERENCES)
        framework = manifest.compliance_framework.value

        context = BuildContext(
            registry=self.registry,
            compliance_framework=framework,
            environment=ctx.environment,
            environment_defaults=manifest.environment_defaults(ctx.environment),
            policy_overrides=policy_overrides_for(framework),
        )
        builder = ConfigBuilder()

        def build_one(spec: ComponentSpec) -> ResolvedConfig:
            return builder.resolve(context, spec)

        resolved = fan_out(
            build_one,
            manifest.components,
            max_workers=ctx.setting("engine", "max_workers"),
        )

        errors: List[ManifestException] = []
        configs: Dict[str, ResolvedConfig] = {}
        for spec, config in zip(manifest.components, resolved):
            kind = context.kind_for(spec.type)
            pending = _pending_ref_paths(references, spec.name)
            violations = collect_violations(
                config.config,
                config_validation_schema(kind),
                prefix=("components", spec.index, "config"),
            )
            errors.extend(v for v in violations if not _under(v.path, pending))
            for issue in config.warnings:
                ctx.add_warning(step_id=self.id, issue=issue)
            configs[spec.name] = config

        if errors:
            raise StageFailure.collect(self.stage, errors)

        ctx.set_artifact(artifacts.CONFIGS, configs)

        policy_hits = sum(len(c.warnings) for c in configs.values())
        ctx.log(
            step_id=self.id,
            level="info",
            message="configuration resolved",
            components=len(configs),
            framework=framework,
            policy_overrides=policy_hits,
        )
        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary=f"configuration resolved for {len(configs)} component(s)",
            metrics={"components": len(configs), "policy_overrides": policy_hits},
            payload={"hashes": {name: c.config_hash for name, c in configs.items()}},
        )
