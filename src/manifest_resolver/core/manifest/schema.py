# src/manifest_resolver/core/manifest/schema.py
"""
Composição do schema mestre do manifest (JSON Schema draft 2020-12).

O schema mestre é o schema base fixo mais o schema de `config` de cada tipo
de componente registrado, guardado em `$defs` sob `component.<type>.config`.
A composição é um fold puro sobre o registry: cada tipo acrescenta uma
entrada em `$defs` e uma cláusula `if type == T then config: $ref`.

O schema roda antes da hidratação. Por isso valores de config podem ainda ser
tokens (`${env:x}`) ou mapas por ambiente (`{dev: 1, prod: 3}`); essas formas
são aceitas como valores diferidos e a configuração final é validada de novo,
já resolvida, pelo estágio de config.
"""

from __future__ import annotations

from copy import deepcopy
from functools import reduce
from typing import Any, Dict, Iterable

from manifest_resolver.core.manifest.model import ACCESS_LEVELS, COMPLIANCE_FRAMEWORKS
from manifest_resolver.core.registry.kinds import ComponentKind, ComponentRegistry


SCHEMA_DIALECT = "https://json-schema.org/draft/2020-12/schema"
NAME_PATTERN = "^[a-z][a-z0-9-]*$"
CAPABILITY_PATTERN = "^[a-z0-9-]+:[a-z0-9-]+$"

_STRING_MAP = {"type": "object", "additionalProperties": {"type": "string"}}
_LABEL_MAP = {"type": "object", "additionalProperties": {"type": ["string", "number", "boolean"]}}
_DEFERRED = {"$ref": "#/$defs/deferredValue"}


def config_def_name(component_type: str) -> str:
    return f"component.{component_type}.config"


BASE_SCHEMA: Dict[str, Any] = {
    "$schema": SCHEMA_DIALECT,
    "type": "object",
    "required": ["service", "owner", "complianceFramework", "components"],
    "additionalProperties": False,
    "properties": {
        "service": {"type": "string", "pattern": NAME_PATTERN},
        "owner": {"type": "string", "minLength": 1},
        "complianceFramework": {"enum": list(COMPLIANCE_FRAMEWORKS)},
        "labels": _LABEL_MAP,
        "environments": {
            "type": "object",
            "propertyNames": {"pattern": NAME_PATTERN},
            "additionalProperties": {
                "type": "object",
                "properties": {"defaults": {"type": "object"}},
                "additionalProperties": False,
            },
        },
        "components": {
            "type": "array",
            "minItems": 1,
            "items": {"$ref": "#/$defs/component"},
        },
        "governance": {
            "type": "object",
            "properties": {
                "cdkNag": {
                    "type": "object",
                    "properties": {
                        "suppress": {"type": "array", "items": {"type": "object"}},
                    },
                },
            },
        },
        "patches": {"type": "array", "items": {"type": "object"}},
    },
    "$defs": {
        "component": {
            "type": "object",
            "required": ["name", "type"],
            "additionalProperties": False,
            "properties": {
                "name": {"type": "string", "pattern": NAME_PATTERN},
                "type": {"type": "string"},
                "config": {"type": "object"},
                "binds": {"type": "array", "items": {"$ref": "#/$defs/bind"}},
                "labels": {"type": "object"},
                "overrides": {"type": "object"},
                "policy": {"type": "object"},
            },
        },
        "bind": {
            "type": "object",
            "required": ["capability", "access"],
            "additionalProperties": False,
            "properties": {
                "to": {"type": "string", "minLength": 1},
                "select": {
                    "type": "object",
                    "required": ["type"],
                    "additionalProperties": False,
                    "properties": {
                        "type": {"type": "string"},
                        "withLabels": _LABEL_MAP,
                    },
                },
                "capability": {"type": "string", "pattern": CAPABILITY_PATTERN},
                "access": {"enum": list(ACCESS_LEVELS)},
                "env": _STRING_MAP,
                "options": {"type": "object"},
            },
            "oneOf": [{"required": ["to"]}, {"required": ["select"]}],
            "x-errorMessage": "bind must declare exactly one of 'to' or 'select'",
        },
        "deferredValue": {
            "anyOf": [
                {"type": "string", "pattern": "\\$\\{"},
                {"$ref": "#/$defs/perEnvironmentValue"},
            ]
        },
    },
}


def defer(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Aceita, em cada nível, o valor original ou um valor diferido."""
    out = dict(schema)
    if isinstance(out.get("properties"), dict):
        out["properties"] = {k: defer(v) for k, v in out["properties"].items()}
    if isinstance(out.get("items"), dict):
        out["items"] = defer(out["items"])
    if isinstance(out.get("additionalProperties"), dict):
        out["additionalProperties"] = defer(out["additionalProperties"])
    return {"anyOf": [out, _DEFERRED]}


def _add_kind(schema: Dict[str, Any], kind: ComponentKind) -> Dict[str, Any]:
    config_schema = deepcopy(kind.config_schema)
    config_schema["properties"] = {
        k: defer(v) for k, v in (config_schema.get("properties") or {}).items()
    }
    # `required` continua valendo no nível do componente
    schema["$defs"][config_def_name(kind.type)] = config_schema

    component = schema["$defs"]["component"]
    component["properties"]["type"].setdefault("enum", []).append(kind.type)
    component.setdefault("allOf", []).append(
        {
            "if": {"properties": {"type": {"const": kind.type}}, "required": ["type"]},
            "then": {"properties": {"config": {"$ref": f"#/$defs/{config_def_name(kind.type)}"}}},
        }
    )
    return schema


def compose_schema(
    registry: ComponentRegistry,
    environment_names: Iterable[str] = (),
) -> Dict[str, Any]:
    """
    Monta o schema mestre a partir do schema base e do registry.

    Args:
        registry: tipos de componente registrados.
        environment_names: nomes aceitos como chave de mapas por ambiente.

    Returns:
        Dict[str, Any]: schema mestre (novo objeto; `BASE_SCHEMA` não é mutado).
    """
    schema = deepcopy(BASE_SCHEMA)
    schema["$defs"]["perEnvironmentValue"] = {
        "type": "object",
        "minProperties": 1,
        "propertyNames": {"enum": sorted(set(environment_names))},
    }
    return reduce(_add_kind, registry.kinds(), schema)


def config_validation_schema(kind: ComponentKind) -> Dict[str, Any]:
    """Schema estrito da configuração final (resolvida) de um tipo."""
    schema = deepcopy(kind.config_schema)
    schema["$schema"] = SCHEMA_DIALECT
    return schema
