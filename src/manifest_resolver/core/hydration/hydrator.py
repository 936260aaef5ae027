# src/manifest_resolver/core/hydration/hydrator.py
"""
Context Hydrator — resolve interpolação para o ambiente alvo.

Escopo:
    - apenas blocos de componente (`config`, `binds`, `labels`, `overrides`,
      `policy`); `environments` e `governance` permanecem como escritos
    - `${env:key}` busca em `environments.<env>.defaults` (chaves pontuadas
      percorrem mapas aninhados)
    - `${envIs:name}` vira booleano (`ambiente alvo == name`)
    - mapas inline por ambiente (`{dev: x, prod: y}`) viram o valor do alvo

Um mapa é "por ambiente" quando não é vazio e todas as suas chaves são nomes
de ambiente: os declarados em `environments` (mais o alvo) ou, sem
declaração, o alvo e os nomes bem conhecidos dos settings. `labels` e os
mapas `env`/`options` de cada bind nunca são lidos como mapa por ambiente;
suas chaves são dados.

Todos os erros da passada são acumulados; o estágio falha no final.
Hidratação resolve interpolação, não precedência de configuração.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Set

from manifest_resolver.core.exceptions import HydrationError

from .interpolation import REF_KIND, interpolate


COMPONENT_BLOCKS = ("config", "binds", "labels", "overrides", "policy")
BIND_DATA_KEYS = ("env", "options")

_MISSING = object()


@dataclass(frozen=True)
class RefOccurrence:
    """Um `${ref:...}` encontrado na hidratação (expressão já sem tokens internos)."""

    component_index: int
    path: str
    expression: str

    @property
    def token(self) -> str:
        return f"${{{REF_KIND}:{self.expression}}}"


@dataclass
class HydrationResult:
    document: Dict[str, Any]
    errors: List[HydrationError] = field(default_factory=list)
    refs: List[RefOccurrence] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def lookup_dotted(data: Dict[str, Any], key: str) -> Any:
    """Busca `a.b.c` em mapas aninhados; chave literal com ponto tem prioridade."""
    if key in data:
        return data[key]
    current: Any = data
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return _MISSING
        current = current[part]
    return current


def environment_names(
    doc: Dict[str, Any],
    target: str,
    well_known: Iterable[str] = (),
) -> Set[str]:
    declared = doc.get("environments") if isinstance(doc.get("environments"), dict) else {}
    if declared:
        return set(declared) | {target}
    return {target} | set(well_known)


class ContextHydrator:
    """Hidrata os componentes de um documento já validado pelo schema."""

    def __init__(self, environment: str, *, well_known_environments: Iterable[str] = ()):
        self.environment = environment
        self.well_known_environments = tuple(well_known_environments)

    def hydrate(self, doc: Dict[str, Any]) -> HydrationResult:
        errors: List[HydrationError] = []
        refs: List[RefOccurrence] = []
        current = {"component": -1, "path": "$"}
        hydrated = deepcopy(doc)

        environments = doc.get("environments") or {}
        if environments and self.environment not in environments:
            errors.append(
                HydrationError(
                    f"Target environment '{self.environment}' is not declared in environments",
                    path="$.environments",
                    details={"environment": self.environment, "declared": sorted(environments)},
                    hint=f"Declare environments.{self.environment} or pick one of {sorted(environments)}",
                )
            )
            return HydrationResult(document=hydrated, errors=errors)

        env_entry = environments.get(self.environment) or {}
        defaults = env_entry.get("defaults") or {} if isinstance(env_entry, dict) else {}
        names = environment_names(doc, self.environment, self.well_known_environments)

        def resolve(kind: str, key: str) -> Any:
            if kind == "env":
                value = lookup_dotted(defaults, key)
                if value is _MISSING:
                    raise HydrationError(
                        f"Unresolved token ${{env:{key}}}: key not found in "
                        f"environments.{self.environment}.defaults",
                        token=f"${{env:{key}}}",
                        details={"environment": self.environment, "key": key},
                    )
                return deepcopy(value)
            if kind == "envIs":
                return self.environment == key
            if kind == REF_KIND:
                refs.append(RefOccurrence(current["component"], current["path"], key))
                return f"${{{REF_KIND}:{key}}}"
            raise HydrationError(
                f"Unknown interpolation token kind '{kind}'",
                token=f"${{{kind}:{key}}}",
                hint="Supported tokens: ${env:key}, ${envIs:name}, ${ref:component.capability.field}",
            )

        def walk(value: Any, path: str, per_env: bool = True) -> Any:
            if isinstance(value, dict):
                if per_env and value and all(isinstance(k, str) and k in names for k in value):
                    if self.environment not in value:
                        errors.append(
                            HydrationError(
                                f"Per-environment value has no entry for '{self.environment}'",
                                path=path,
                                details={"environment": self.environment, "available": sorted(value)},
                            )
                        )
                        return value
                    return walk(value[self.environment], path)
                return {k: walk(v, f"{path}.{k}") for k, v in value.items()}
            if isinstance(value, list):
                return [walk(v, f"{path}[{i}]") for i, v in enumerate(value)]
            if isinstance(value, str):
                current["path"] = path
                try:
                    return interpolate(value, resolve, path=path)
                except HydrationError as e:
                    # tokens aninhados levantam sem path; o path é da string
                    errors.append(
                        HydrationError(
                            e.message,
                            path=path,
                            details=e.details,
                            hint=e.hint,
                            token=e.token,
                        )
                    )
                    return value
            return value

        def walk_bind(bind: Any, path: str) -> Any:
            if not isinstance(bind, dict):
                return walk(bind, path)
            # chaves de `env` e `options` são dados do bind, nunca ambientes
            return {
                k: walk(v, f"{path}.{k}", per_env=k not in BIND_DATA_KEYS)
                for k, v in bind.items()
            }

        for i, component in enumerate(hydrated.get("components") or []):
            if not isinstance(component, dict):
                continue
            current["component"] = i
            for block in COMPONENT_BLOCKS:
                if block not in component:
                    continue
                path = f"$.components[{i}].{block}"
                if block == "labels":
                    component[block] = walk(component[block], path, per_env=False)
                elif block == "binds" and isinstance(component[block], list):
                    component[block] = [
                        walk_bind(bind, f"{path}[{j}]") for j, bind in enumerate(component[block])
                    ]
                else:
                    component[block] = walk(component[block], path)

        return HydrationResult(document=hydrated, errors=errors, refs=refs)
