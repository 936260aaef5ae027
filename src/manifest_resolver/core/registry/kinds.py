# src/manifest_resolver/core/registry/kinds.py
"""
Registro estático de tipos de componente.

Cada tipo de componente é um registro de dados (`ComponentKind`) com:
    - schema de `config` (JSON Schema)
    - capabilities fornecidas e exigidas
    - fallbacks (camada 1 do ConfigBuilder)
    - defaults por compliance framework (camada 2)
    - templates de capability usados pelo synthesizer dry-run

O conjunto de tipos é fechado: é montado uma vez no início do processo e
validado por inteiro antes de qualquer resolução. Uma entrada malformada é
bug de plataforma e vira `RegistryDefinitionError` (categoria internal).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError

from manifest_resolver.core.config.safety import check_fallback_safety
from manifest_resolver.core.exceptions import RegistryDefinitionError
from manifest_resolver.core.manifest.model import COMPLIANCE_FRAMEWORKS


@dataclass(frozen=True)
class ComponentKind:
    type: str
    config_schema: Dict[str, Any]
    provides: Tuple[str, ...] = ()
    requires: Tuple[str, ...] = ()
    fallbacks: Dict[str, Any] = field(default_factory=dict)
    compliance_defaults: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    capability_templates: Dict[str, Dict[str, str]] = field(default_factory=dict)
    compute: bool = False

    @property
    def config_keys(self) -> Tuple[str, ...]:
        return tuple((self.config_schema.get("properties") or {}).keys())

    def defaults_for(self, framework: str) -> Dict[str, Any]:
        return dict(self.compliance_defaults.get(framework) or {})

    def describe(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "configSchema": self.config_schema,
            "providedCapabilities": list(self.provides),
            "requiredCapabilities": list(self.requires),
        }


def validate_kind(kind: ComponentKind) -> None:
    """Valida uma entrada do registry; falhas são internas."""
    if not isinstance(kind.type, str) or not kind.type.strip():
        raise RegistryDefinitionError("component type must be a non-empty string")

    details = {"component_type": kind.type}

    if kind.config_schema.get("type") != "object":
        raise RegistryDefinitionError(
            f"config schema of '{kind.type}' must describe an object", details=details
        )
    try:
        Draft202012Validator.check_schema(kind.config_schema)
    except SchemaError as e:
        raise RegistryDefinitionError(
            f"config schema of '{kind.type}' is not a valid JSON Schema: {e.message}",
            details=details,
        ) from e

    unknown = sorted(set(kind.compliance_defaults) - set(COMPLIANCE_FRAMEWORKS))
    if unknown:
        raise RegistryDefinitionError(
            f"'{kind.type}' declares defaults for unknown frameworks: {unknown}",
            details=details,
        )

    missing_templates = sorted(set(kind.provides) - set(kind.capability_templates))
    if missing_templates:
        raise RegistryDefinitionError(
            f"'{kind.type}' provides capabilities without templates: {missing_templates}",
            details=details,
        )

    check_fallback_safety(kind.type, kind.fallbacks)


class ComponentRegistry:
    """Registro imutável de tipos de componente, na ordem de registro."""

    def __init__(self, kinds: Iterable[ComponentKind]):
        by_type: Dict[str, ComponentKind] = {}
        for kind in kinds:
            validate_kind(kind)
            if kind.type in by_type:
                raise RegistryDefinitionError(
                    f"Duplicate component type: {kind.type}",
                    details={"component_type": kind.type},
                )
            by_type[kind.type] = kind
        self._kinds: Mapping[str, ComponentKind] = by_type

    def __contains__(self, component_type: object) -> bool:
        return component_type in self._kinds

    def get(self, component_type: str) -> Optional[ComponentKind]:
        return self._kinds.get(component_type)

    def types(self) -> List[str]:
        return list(self._kinds)

    def kinds(self) -> List[ComponentKind]:
        return list(self._kinds.values())

    def list_component_types(self) -> List[Dict[str, Any]]:
        return [k.describe() for k in self._kinds.values()]

    def providers_of(self, capability: str) -> List[str]:
        return [k.type for k in self._kinds.values() if capability in k.provides]
