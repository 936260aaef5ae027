# src/manifest_resolver/core/binding/resolver.py
"""
BinderResolver — resolução de binds e síntese em níveis.

Fluxo:
    1. monta o grafo de dependências (alvos de bind + produtores de `${ref}`)
    2. ordena em níveis topológicos; ciclo → `CyclicBindingDependencyError`
    3. para cada nível (barreira entre níveis):
        a. resolve os binds de cada componente em paralelo; cada bind lê
           apenas capabilities publicadas por níveis anteriores
        b. substitui os `${ref}` da configuração pelos valores publicados
        c. sintetiza cada componente em paralelo
        d. publica as capabilities, na ordem de declaração
    4. congela o registro de capabilities

Erros de bind de um nível são acumulados; níveis seguintes não são
processados depois de um nível com erro, porque dependeriam de capabilities
que não foram publicadas.
"""

from __future__ import annotations

import re
from copy import deepcopy
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Tuple

from manifest_resolver.core.config.builder import ResolvedConfig
from manifest_resolver.core.engine.parallel import fan_out
from manifest_resolver.core.exceptions import (
    ComponentReferenceError,
    CyclicBindingDependencyError,
    ManifestException,
)
from manifest_resolver.core.hydration.hydrator import RefOccurrence
from manifest_resolver.core.hydration.interpolation import stringify
from manifest_resolver.core.manifest.model import ComponentSpec, Manifest
from manifest_resolver.core.references.refs import ComponentRef

from .capabilities import CapabilityRecord, CapabilityRegistry
from .graph import DependencyGraph
from .registry import BinderRegistry
from .strategy import BindingContext, BindingResult, merge_results
from .trace import BindTrace

if TYPE_CHECKING:
    from manifest_resolver.synthesis.backend import SynthesisBackend


BindKey = Tuple[str, int]
ResolvedRef = Tuple[RefOccurrence, ComponentRef]

_PATH_PART = re.compile(r"\.([^.\[\]]+)|\[(\d+)\]")


@dataclass
class ComponentBinding:
    component: str
    level: int
    traces: List[BindTrace] = field(default_factory=list)
    result: BindingResult = field(default_factory=BindingResult)
    effective_config: Dict[str, Any] = field(default_factory=dict)
    ref_values: Dict[str, Any] = field(default_factory=dict)
    capabilities: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    construct_handles: Dict[str, str] = field(default_factory=dict)


@dataclass
class BindingReport:
    levels: List[List[str]] = field(default_factory=list)
    components: Dict[str, ComponentBinding] = field(default_factory=dict)
    errors: List[ManifestException] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    @property
    def synthesis_order(self) -> List[str]:
        return [name for level in self.levels for name in level]


def _split_path(path: str) -> List[Any]:
    return [name if index is None else int(index) for name, index in _PATH_PART.findall(path)]


def substitute_refs(
    config: Dict[str, Any],
    component_path: str,
    values: Sequence[Tuple[RefOccurrence, Any]],
) -> Dict[str, Any]:
    """
    Troca `${ref:...}` pelos valores publicados, apenas nas posições onde a
    hidratação os encontrou dentro de `config`.

    Uma string que é exatamente o token recebe o valor com seu tipo; dentro de
    texto o valor é convertido para string.
    """
    out = deepcopy(config)
    prefix = f"{component_path}.config"
    for occurrence, value in values:
        if not occurrence.path.startswith(prefix):
            continue
        parts = _split_path(occurrence.path[len(prefix):])
        if not parts:
            continue
        parent: Any = out
        try:
            for part in parts[:-1]:
                parent = parent[part]
            current = parent[parts[-1]]
        except (KeyError, IndexError, TypeError):
            continue  # substituído por uma camada superior
        if not isinstance(current, str) or occurrence.token not in current:
            continue
        if current == occurrence.token:
            parent[parts[-1]] = deepcopy(value)
        else:
            parent[parts[-1]] = current.replace(
                occurrence.token, stringify(value, path=occurrence.path, token=occurrence.token)
            )
    return out


class BinderResolver:
    def __init__(
        self,
        binders: BinderRegistry,
        backend: "SynthesisBackend",
        *,
        region: str = "us-east-1",
        account: str = "000000000000",
        max_workers: Optional[int] = None,
    ):
        self.binders = binders
        self.backend = backend
        self.region = region
        self.account = account
        self.max_workers = max_workers

    def dependency_graph(
        self,
        manifest: Manifest,
        targets: Dict[BindKey, str],
        refs: Dict[str, List[ResolvedRef]],
    ) -> DependencyGraph:
        edges = [(source, target) for (source, _), target in sorted(targets.items())]
        for source, resolved in sorted(refs.items()):
            edges.extend((source, ref.component) for _, ref in resolved)
        return DependencyGraph(manifest.component_names, edges)

    def resolve(
        self,
        manifest: Manifest,
        environment: str,
        targets: Dict[BindKey, str],
        refs: Dict[str, List[ResolvedRef]],
        configs: Dict[str, ResolvedConfig],
        capabilities: Optional[CapabilityRegistry] = None,
    ) -> BindingReport:
        report = BindingReport()
        published = capabilities if capabilities is not None else CapabilityRegistry()

        try:
            report.levels = self.dependency_graph(manifest, targets, refs).levels()
        except CyclicBindingDependencyError as e:
            first = manifest.component(e.cycle[0]) if e.cycle else None
            if first is not None:
                e.path = f"{first.path}.binds"
            report.errors.append(e)
            return report

        for level_index, level in enumerate(report.levels):
            specs = [manifest.component(name) for name in level]

            def bind_one(spec: ComponentSpec) -> Tuple[ComponentBinding, List[ManifestException]]:
                return self._bind_component(
                    manifest, environment, spec, level_index, targets, refs, configs, published
                )

            bound = fan_out(bind_one, specs, max_workers=self.max_workers)
            level_errors = [e for _, errors in bound for e in errors]
            for binding, _ in bound:
                report.components[binding.component] = binding
            if level_errors:
                report.errors.extend(level_errors)
                break

            bindings = [binding for binding, _ in bound]

            def synthesize_one(binding: ComponentBinding):
                spec = manifest.component(binding.component)
                return self.backend.synthesize(
                    spec.type,
                    binding.effective_config,
                    binding.result,
                    component=spec.name,
                    service=manifest.service,
                )

            outputs = fan_out(synthesize_one, bindings, max_workers=self.max_workers)
            for spec, binding, output in zip(specs, bindings, outputs):
                binding.capabilities = {k: dict(v) for k, v in sorted(output.capabilities_provided.items())}
                binding.construct_handles = dict(sorted(output.construct_handles.items()))
                for capability, data in binding.capabilities.items():
                    published.publish(
                        CapabilityRecord(
                            producer=spec.name,
                            capability=capability,
                            component_type=spec.type,
                            data=data,
                        )
                    )

        published.freeze()
        return report

    def _bind_component(
        self,
        manifest: Manifest,
        environment: str,
        spec: ComponentSpec,
        level: int,
        targets: Dict[BindKey, str],
        refs: Dict[str, List[ResolvedRef]],
        configs: Dict[str, ResolvedConfig],
        published: CapabilityRegistry,
    ) -> Tuple[ComponentBinding, List[ManifestException]]:
        binding = ComponentBinding(component=spec.name, level=level)
        errors: List[ManifestException] = []
        results: List[Tuple[Any, BindingResult]] = []
        source_config = configs[spec.name].config

        for directive in spec.binds:
            path = spec.bind_path(directive)
            trace = BindTrace(
                source=spec.name,
                bind_index=directive.index,
                capability=directive.capability,
                access=directive.access,
            )
            binding.traces.append(trace)
            try:
                target_name = targets[(spec.name, directive.index)]
                trace.target_resolved(target_name)

                strategy = self.binders.find(spec.type, directive.capability, path=f"{path}.capability")
                trace.strategy_matched(strategy.name)
                strategy.check_access(directive, path)

                record = published.lookup(target_name, directive.capability)
                target = manifest.component(target_name)
                context = BindingContext(
                    source=spec,
                    source_config=source_config,
                    target=target,
                    target_config=configs[target_name].config,
                    directive=directive,
                    capability=record,
                    compliance_framework=manifest.compliance_framework,
                    environment=environment,
                    region=self.region,
                    account=self.account,
                )
                results.append((directive, strategy.bind(context)))
                trace.bound()
            except ManifestException as e:
                if e.path == "$":
                    e.path = path
                trace.fail(e)
                errors.append(e)

        merged, duplicate_errors = merge_results(spec, results)
        binding.result = merged
        errors.extend(duplicate_errors)

        values: List[Tuple[RefOccurrence, Any]] = []
        for occurrence, ref in refs.get(spec.name, []):
            data = {r.capability: r.data for r in published.for_producer(ref.component)}
            try:
                value = ref.select(data)
            except (KeyError, TypeError, IndexError):
                errors.append(
                    ComponentReferenceError(
                        f"Reference {occurrence.token} does not match any value published by "
                        f"'{ref.component}'",
                        path=occurrence.path,
                        details={
                            "expression": occurrence.expression,
                            "published": {k: sorted(v) for k, v in sorted(data.items())},
                        },
                    )
                )
                continue
            values.append((occurrence, value))
            binding.ref_values[occurrence.token] = value

        try:
            binding.effective_config = substitute_refs(source_config, spec.path, values)
        except ManifestException as e:
            errors.append(e)
            binding.effective_config = deepcopy(source_config)
        return binding, errors
