"""
Estágios canônicos da resolução de um manifest.

Ordem (via `depends_on`):
    manifest.parse → manifest.schema → manifest.hydrate → manifest.references
    → config.build → binding.resolve → governance.validate → plan.assemble
"""

from __future__ import annotations

from typing import List, Optional

from manifest_resolver.core.binding.registry import BinderRegistry
from manifest_resolver.core.pipeline.registry import StepRegistry
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.registry.catalog import default_registry
from manifest_resolver.core.registry.kinds import ComponentRegistry
from manifest_resolver.synthesis.backend import SynthesisBackend

from . import artifacts
from .binding.resolve import BindingResolveStep
from .config.build import ConfigBuildStep
from .governance.validate import GovernanceValidateStep
from .manifest.hydrate import ManifestHydrateStep
from .manifest.parse import ManifestParseStep
from .manifest.references import ManifestReferencesStep
from .manifest.schema import ManifestSchemaStep
from .plan.assemble import PlanAssembleStep


def default_steps(
    registry: Optional[ComponentRegistry] = None,
    binders: Optional[BinderRegistry] = None,
    backend: Optional[SynthesisBackend] = None,
) -> List[Step]:
    registry = registry or default_registry()
    steps = StepRegistry()
    for step in (
        ManifestParseStep(),
        ManifestSchemaStep(registry=registry),
        ManifestHydrateStep(),
        ManifestReferencesStep(registry=registry),
        ConfigBuildStep(registry=registry),
        BindingResolveStep(registry=registry, binders=binders, backend=backend),
        GovernanceValidateStep(),
        PlanAssembleStep(),
    ):
        steps.add(step)
    return steps.list()


__all__ = [
    "BindingResolveStep",
    "ConfigBuildStep",
    "GovernanceValidateStep",
    "ManifestHydrateStep",
    "ManifestParseStep",
    "ManifestReferencesStep",
    "ManifestSchemaStep",
    "PlanAssembleStep",
    "artifacts",
    "default_steps",
]
