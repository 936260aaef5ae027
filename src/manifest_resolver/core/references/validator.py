# src/manifest_resolver/core/references/validator.py
"""
Validador de referências e semântica do manifest hidratado.

Verificações (todas acumuladas antes de o estágio falhar):
    - nomes de componente únicos
    - todo `to:` existe; todo `select:` resolve para exatamente um componente
    - um bind não aponta para o próprio componente
    - o tipo do alvo fornece a capability pedida
    - todo `${ref:...}` aponta para um componente existente (e, se houver
      capability, uma que o tipo dele fornece)

Saída: o mapa de alvos resolvidos por bind, usado pelo binder, e as
referências já interpretadas por componente.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from manifest_resolver.core.exceptions import (
    CapabilityNotProvidedError,
    ComponentReferenceError,
    DuplicateComponentError,
    ManifestException,
)
from manifest_resolver.core.hydration.hydrator import RefOccurrence
from manifest_resolver.core.manifest.model import Manifest
from manifest_resolver.core.registry.kinds import ComponentRegistry

from .refs import ComponentRef
from .selectors import resolve_target


BindKey = Tuple[str, int]  # (componente de origem, índice do bind)


@dataclass
class ReferenceReport:
    targets: Dict[BindKey, str] = field(default_factory=dict)
    refs: Dict[str, List[Tuple[RefOccurrence, ComponentRef]]] = field(default_factory=dict)
    errors: List[ManifestException] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class ReferenceValidator:
    def __init__(self, registry: ComponentRegistry):
        self.registry = registry

    def validate(self, manifest: Manifest, refs: Iterable[RefOccurrence] = ()) -> ReferenceReport:
        report = ReferenceReport()
        self._check_unique_names(manifest, report)
        self._check_binds(manifest, report)
        self._check_refs(manifest, refs, report)
        return report

    def _check_unique_names(self, manifest: Manifest, report: ReferenceReport) -> None:
        first_seen: Dict[str, int] = {}
        for c in manifest.components:
            if c.name in first_seen:
                report.errors.append(
                    DuplicateComponentError(
                        f"Component name '{c.name}' is declared more than once",
                        path=f"{c.path}.name",
                        details={"name": c.name, "first_index": first_seen[c.name], "index": c.index},
                    )
                )
            else:
                first_seen[c.name] = c.index

    def _check_binds(self, manifest: Manifest, report: ReferenceReport) -> None:
        for component in manifest.components:
            for bind in component.binds:
                path = component.bind_path(bind)
                try:
                    target = resolve_target(bind, manifest.components, path=path)
                except ManifestException as e:
                    report.errors.append(e)
                    continue

                if target.name == component.name:
                    report.errors.append(
                        ComponentReferenceError(
                            f"Component '{component.name}' cannot bind to itself",
                            path=path,
                            details={"component": component.name},
                        )
                    )
                    continue

                kind = self.registry.get(target.type)
                if kind is not None and bind.capability not in kind.provides:
                    report.errors.append(
                        CapabilityNotProvidedError(
                            f"Component '{target.name}' ({target.type}) does not provide "
                            f"capability '{bind.capability}'",
                            path=f"{path}.capability",
                            details={
                                "target": target.name,
                                "target_type": target.type,
                                "capability": bind.capability,
                                "provided": list(kind.provides),
                            },
                        )
                    )
                    continue

                report.targets[(component.name, bind.index)] = target.name

    def _check_refs(
        self,
        manifest: Manifest,
        refs: Iterable[RefOccurrence],
        report: ReferenceReport,
    ) -> None:
        for occurrence in refs:
            source = manifest.components[occurrence.component_index]
            try:
                ref = ComponentRef.parse(occurrence.expression, path=occurrence.path)
            except ManifestException as e:
                report.errors.append(e)
                continue

            target = manifest.component(ref.component)
            if target is None:
                report.errors.append(
                    ComponentReferenceError(
                        f"Reference {occurrence.token} names unknown component '{ref.component}'",
                        path=occurrence.path,
                        details={"expression": occurrence.expression},
                    )
                )
                continue

            if target.name == source.name:
                report.errors.append(
                    ComponentReferenceError(
                        f"Component '{source.name}' cannot reference itself",
                        path=occurrence.path,
                        details={"expression": occurrence.expression},
                    )
                )
                continue

            kind = self.registry.get(target.type)
            if ref.capability is not None and kind is not None and ref.capability not in kind.provides:
                report.errors.append(
                    CapabilityNotProvidedError(
                        f"Reference {occurrence.token}: '{target.name}' ({target.type}) does not "
                        f"provide capability '{ref.capability}'",
                        path=occurrence.path,
                        details={"expression": occurrence.expression, "provided": list(kind.provides)},
                    )
                )
                continue

            report.refs.setdefault(source.name, []).append((occurrence, ref))
