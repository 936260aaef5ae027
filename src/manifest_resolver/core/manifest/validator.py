# src/manifest_resolver/core/manifest/validator.py
"""
Validador estrutural do manifest contra o schema composto.

Todas as violações são acumuladas (não apenas a primeira). Cada violação vira
um `SchemaViolation` com:
    - path: notação `$.components[0].config.memorySize`
    - pointer: JSON pointer equivalente (`/components/0/config/memorySize`)
    - rule: palavra-chave do JSON Schema violada (`required`, `enum`, ...)

Para `required`, a propriedade ausente é anexada ao caminho
(`$.complianceFramework`). Violações são ordenadas por (pointer, rule) para
saída determinística.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List, Sequence

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError, best_match

from manifest_resolver.core.exceptions import SchemaViolation


_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$-]*$")


def format_path(parts: Iterable[Any], root: str = "$") -> str:
    out = root
    for p in parts:
        if isinstance(p, int):
            out += f"[{p}]"
        elif _IDENTIFIER.match(str(p)):
            out += f".{p}"
        else:
            out += f"[{str(p)!r}]"
    return out


def format_pointer(parts: Iterable[Any]) -> str:
    escaped = [str(p).replace("~", "~0").replace("/", "~1") for p in parts]
    return "/" + "/".join(escaped) if escaped else ""


def _missing_property(error: ValidationError) -> str | None:
    instance = error.instance if isinstance(error.instance, dict) else {}
    for prop in error.validator_value or ():
        if prop not in instance and error.message.startswith(repr(prop)):
            return prop
    return None


def _unwrap(error: ValidationError) -> ValidationError:
    """Para valores diferidos (anyOf[original, diferido]) reporta o erro do ramo original."""
    if error.validator == "anyOf" and error.context:
        original = [e for e in error.context if e.relative_schema_path and e.relative_schema_path[0] == 0]
        if original:
            return _unwrap(best_match(original))
    return error


def _to_violation(error: ValidationError, prefix: Sequence[Any]) -> SchemaViolation:
    error = _unwrap(error)
    parts: List[Any] = list(prefix) + list(error.absolute_path)
    message = error.message

    custom = error.schema.get("x-errorMessage") if isinstance(error.schema, dict) else None
    if custom and error.validator in ("oneOf", "anyOf"):
        message = custom

    if error.validator == "required":
        missing = _missing_property(error)
        if missing is not None:
            parts.append(missing)

    return SchemaViolation(
        message,
        path=format_path(parts),
        details={"rule": error.validator, "pointer": format_pointer(parts)},
        rule=str(error.validator),
        pointer=format_pointer(parts),
    )


def collect_violations(
    instance: Any,
    schema: Dict[str, Any],
    *,
    prefix: Sequence[Any] = (),
) -> List[SchemaViolation]:
    """Valida `instance` e retorna todas as violações em ordem determinística."""
    validator = Draft202012Validator(schema)
    violations = [_to_violation(e, prefix) for e in validator.iter_errors(instance)]

    unique: Dict[tuple, SchemaViolation] = {}
    for v in violations:
        unique.setdefault((v.pointer, v.rule, v.message), v)

    return sorted(unique.values(), key=lambda v: (v.pointer, v.rule, v.message))


def validate_manifest_document(doc: Dict[str, Any], schema: Dict[str, Any]) -> List[SchemaViolation]:
    return collect_violations(doc, schema)
