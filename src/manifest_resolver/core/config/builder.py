# src/manifest_resolver/core/config/builder.py
"""
ConfigBuilder — resolução da configuração final de um componente.

A configuração final é o deep-merge determinístico de cinco camadas
explícitas, da menor para a maior precedência:

    1. fallbacks         → baseline seguro por tipo (dados do registry)
    2. compliance        → defaults do compliance framework ativo
    3. environment       → `environments.<env>.defaults` do manifest,
                           restrito às chaves do schema do tipo, mais o
                           bloco `<type>` quando presente
    4. component         → `config` do componente, já hidratado
    5. policy            → valores forçados pela governança

Política de merge (a mesma de `deep_merge`, modo não estrito):
    - objetos → merge recursivo por chave
    - arrays e escalares → substituídos pela camada superior

Decisões arquiteturais:
    - Camadas são dados (`ConfigLayers`), não métodos sobrescritos por tipo
    - `merge_layers` é um fold puro; nenhum relógio, aleatoriedade ou I/O
    - A procedência de cada folha é registrada para auditoria

Invariantes:
    - Entradas idênticas produzem saída byte a byte idêntica
    - Nenhuma camada de entrada é mutada
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import reduce
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from manifest_resolver.core.errors import POLICY_OVERRIDE_APPLIED, Stage, ValidationIssue, warning
from manifest_resolver.core.exceptions import RegistryDefinitionError

from .hashing import compute_config_hash
from .merge import deep_merge

if TYPE_CHECKING:
    from manifest_resolver.core.manifest.model import ComponentSpec
    from manifest_resolver.core.registry.kinds import ComponentKind, ComponentRegistry


LAYER_NAMES: Tuple[str, ...] = ("fallbacks", "compliance", "environment", "component", "policy")


@dataclass(frozen=True)
class ConfigLayers:
    """As cinco camadas de entrada de um componente, como dados puros."""

    fallbacks: Dict[str, Any] = field(default_factory=dict)
    compliance: Dict[str, Any] = field(default_factory=dict)
    environment: Dict[str, Any] = field(default_factory=dict)
    component: Dict[str, Any] = field(default_factory=dict)
    policy: Dict[str, Any] = field(default_factory=dict)

    def ordered(self) -> List[Tuple[str, Dict[str, Any]]]:
        return [(name, getattr(self, name)) for name in LAYER_NAMES]


@dataclass(frozen=True)
class ResolvedConfig:
    component: str
    type: str
    config: Dict[str, Any]
    provenance: Dict[str, str]
    config_hash: str
    warnings: Tuple[ValidationIssue, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config,
            "provenance": dict(sorted(self.provenance.items())),
            "configHash": self.config_hash,
        }


@dataclass(frozen=True)
class BuildContext:
    """Entradas compartilhadas por todos os componentes de uma resolução."""

    registry: "ComponentRegistry"
    compliance_framework: str
    environment: str
    environment_defaults: Dict[str, Any] = field(default_factory=dict)
    policy_overrides: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def kind_for(self, component_type: str) -> "ComponentKind":
        kind = self.registry.get(component_type)
        if kind is None:
            raise RegistryDefinitionError(
                f"Component type '{component_type}' is not registered",
                details={"component_type": component_type},
            )
        return kind


def merge_layers(layers: ConfigLayers) -> Dict[str, Any]:
    """Fold puro das camadas em ordem de precedência."""
    return reduce(
        lambda acc, layer: deep_merge(acc, layer[1], strict=False),
        layers.ordered(),
        {},
    )


def flatten_leaves(value: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Mapeia caminho pontuado → valor folha (listas e dicts vazios são folhas)."""
    out: Dict[str, Any] = {}
    for key, child in value.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(child, dict) and child:
            out.update(flatten_leaves(child, path))
        else:
            out[path] = child
    return out


def compute_provenance(layers: ConfigLayers, merged: Dict[str, Any]) -> Dict[str, str]:
    """
    Camada responsável por cada folha da configuração final.

    A folha final sempre vem da última camada que a define como folha:
    uma camada posterior que substitui um ancestral (ou transforma a folha em
    objeto) elimina o caminho da saída.
    """
    flattened = [(name, flatten_leaves(layer)) for name, layer in layers.ordered()]
    provenance: Dict[str, str] = {}
    for path in flatten_leaves(merged):
        for name, leaves in reversed(flattened):
            if path in leaves:
                provenance[path] = name
                break
    return provenance


def environment_layer(
    kind: "ComponentKind",
    environment_defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """Camada 3: chaves do schema do tipo + bloco específico `<type>`."""
    allowed = set(kind.config_keys)
    layer = {k: v for k, v in environment_defaults.items() if k in allowed}
    per_type = environment_defaults.get(kind.type)
    if isinstance(per_type, dict):
        layer = deep_merge(layer, per_type, strict=False)
    return layer


class ConfigBuilder:
    """Resolve a configuração final de um componente a partir de suas camadas."""

    def layers_for(self, context: BuildContext, spec: "ComponentSpec") -> ConfigLayers:
        kind = context.kind_for(spec.type)
        return ConfigLayers(
            fallbacks=dict(kind.fallbacks),
            compliance=kind.defaults_for(context.compliance_framework),
            environment=environment_layer(kind, context.environment_defaults),
            component=dict(spec.config),
            policy=dict(context.policy_overrides.get(kind.type) or {}),
        )

    def resolve(self, context: BuildContext, spec: "ComponentSpec") -> ResolvedConfig:
        layers = self.layers_for(context, spec)
        merged = merge_layers(layers)
        provenance = compute_provenance(layers, merged)

        return ResolvedConfig(
            component=spec.name,
            type=spec.type,
            config=merged,
            provenance=provenance,
            config_hash=compute_config_hash(merged),
            warnings=tuple(self._policy_warnings(spec, layers)),
        )

    def _policy_warnings(self, spec: "ComponentSpec", layers: ConfigLayers) -> List[ValidationIssue]:
        component_leaves = flatten_leaves(layers.component)
        out: List[ValidationIssue] = []
        for path, forced in sorted(flatten_leaves(layers.policy).items()):
            if path in component_leaves and component_leaves[path] != forced:
                out.append(
                    warning(
                        stage=Stage.CONFIG,
                        path=f"{spec.path}.config.{path}",
                        message=(
                            f"Policy forces '{path}' to {forced!r} on component "
                            f"'{spec.name}' (component set {component_leaves[path]!r})"
                        ),
                        code=POLICY_OVERRIDE_APPLIED,
                        details={
                            "component": spec.name,
                            "key": path,
                            "component_value": component_leaves[path],
                            "policy_value": forced,
                        },
                    )
                )
        return out
