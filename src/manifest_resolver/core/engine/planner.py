# src/manifest_resolver/core/engine/planner.py
"""
Planejador dos estágios de resolução (DAG).

Valida a estrutura (ids, dependências, ciclos) e produz uma ordem topológica
determinística: entre estágios prontos ao mesmo tempo, vence o menor `id`
em ordem lexicográfica.

Erros aqui são de configuração da plataforma, nunca do manifest.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Set

from manifest_resolver.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Um estágio declarou em `depends_on` um id inexistente."""


class CycleDetectedError(ValueError):
    """As dependências entre estágios formam um ciclo."""


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Ordena os estágios respeitando `depends_on` (Kahn determinístico).

    Raises:
        ValueError: id vazio ou duplicado.
        UnknownDependencyError: dependência inexistente.
        CycleDetectedError: ciclo entre estágios.
    """
    by_id: Dict[str, Step] = {}
    for s in steps:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s

    waiting: Dict[str, int] = {}
    dependents: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, s in by_id.items():
        deps = list(getattr(s, "depends_on", []) or [])
        for dep in deps:
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
            dependents[dep].add(sid)
        waiting[sid] = len(set(deps))

    ready = sorted(sid for sid, n in waiting.items() if n == 0)
    order: List[str] = []
    while ready:
        sid = ready.pop(0)
        order.append(sid)
        for child in dependents[sid]:
            waiting[child] -= 1
            if waiting[child] == 0:
                ready.append(child)
        ready.sort()

    if len(order) != len(by_id):
        stuck = sorted(sid for sid, n in waiting.items() if n > 0)
        raise CycleDetectedError(f"Cycle detected in step dependency graph: {stuck}")

    return [by_id[sid] for sid in order]
