# src/manifest_resolver/core/config/safety.py
"""
Invariante de segurança dos fallbacks (camada 1 do ConfigBuilder).

Fallbacks são o baseline usado quando nenhuma outra camada define um valor.
Por isso nunca podem conter:
    - domínios específicos de ambiente (ex.: api.prod.example.com)
    - recursos dimensionados para produção
    - origens externas não vazias ou CIDRs abertos

A checagem roda quando o registry de componentes é montado. Uma violação é
bug de plataforma, não do manifest, e vira `RegistryDefinitionError`.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List

from manifest_resolver.core.exceptions import RegistryDefinitionError


_ENV_LABEL = re.compile(r"(^|[.\-])(dev|test|qa|staging|stage|prod|production)([.\-]|$)")
_HOSTNAME = re.compile(r"^[a-z0-9-]+(\.[a-z0-9-]+)+$", re.IGNORECASE)
_OPEN_CIDRS = {"0.0.0.0/0", "::/0"}

# limite máximo aceito em fallbacks, por nome de chave
_SIZE_LIMITS: Dict[str, int] = {
    "memorySize": 512,
    "memory": 1024,
    "cpu": 512,
    "desiredCount": 1,
    "minCapacity": 1,
    "maxCapacity": 2,
    "allocatedStorage": 20,
    "numCacheNodes": 1,
    "readCapacity": 5,
    "writeCapacity": 5,
    "reservedConcurrency": 10,
}
_INSTANCE_KEYS = {"instanceClass", "nodeType", "instanceType"}
_SMALL_INSTANCE_SUFFIXES = (".micro", ".small")


def _walk(value: Any, path: str, out: List[str]) -> None:
    if isinstance(value, dict):
        for key, child in value.items():
            child_path = f"{path}.{key}" if path else str(key)
            _check_entry(str(key), child, child_path, out)
            _walk(child, child_path, out)
    elif isinstance(value, list):
        for i, child in enumerate(value):
            _walk(child, f"{path}[{i}]", out)
    elif isinstance(value, str):
        if value in _OPEN_CIDRS:
            out.append(f"{path}: open CIDR '{value}'")
        elif _HOSTNAME.match(value) and _ENV_LABEL.search(value.lower()):
            out.append(f"{path}: environment-specific domain '{value}'")


def _check_entry(key: str, value: Any, path: str, out: List[str]) -> None:
    lowered = key.lower()

    if "domain" in lowered and value not in (None, "", [], {}):
        out.append(f"{path}: domain must not be set in fallbacks")

    if "origins" in lowered and isinstance(value, list) and value:
        out.append(f"{path}: externally reachable origins must be empty")

    if lowered in {"publiclyaccessible", "publicaccess"} and value is True:
        out.append(f"{path}: public access must be disabled")

    limit = _SIZE_LIMITS.get(key)
    if limit is not None and isinstance(value, int) and not isinstance(value, bool) and value > limit:
        out.append(f"{path}: production-sized value {value} (max {limit})")

    if key in _INSTANCE_KEYS and isinstance(value, str) and not value.endswith(_SMALL_INSTANCE_SUFFIXES):
        out.append(f"{path}: production-sized instance '{value}'")


def find_fallback_violations(fallbacks: Dict[str, Any]) -> List[str]:
    """Retorna a lista de violações (vazia quando o fallback é seguro)."""
    out: List[str] = []
    _walk(fallbacks, "", out)
    return out


def check_fallback_safety(component_type: str, fallbacks: Dict[str, Any]) -> None:
    """
    Valida o invariante de segurança dos fallbacks de um tipo de componente.

    Raises:
        RegistryDefinitionError: Se qualquer violação for encontrada.
    """
    violations = find_fallback_violations(fallbacks)
    if violations:
        raise RegistryDefinitionError(
            f"Unsafe fallbacks for component type '{component_type}'",
            details={"component_type": component_type, "violations": violations},
            hint="Fallbacks must be a minimal, environment-neutral baseline",
        )
