# src/manifest_resolver/core/binding/graph.py
"""
Grafo de dependências entre componentes.

Um componente depende de:
    - cada alvo dos seus binds
    - cada produtor referenciado via `${ref:...}` na sua configuração

A saída são níveis topológicos (algoritmo de Kahn): todo componente de um
nível depende apenas de componentes de níveis anteriores. Dentro de um nível
a ordem é a de declaração no manifest.

Ciclos não são resolvidos nem quebrados: viram
`CyclicBindingDependencyError` nomeando os membros do ciclo.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from manifest_resolver.core.exceptions import CyclicBindingDependencyError


Edge = Tuple[str, str]  # (dependente, dependência)


class DependencyGraph:
    def __init__(self, nodes: Sequence[str], edges: Iterable[Edge] = ()):
        self.nodes: List[str] = list(nodes)
        self._order = {name: i for i, name in enumerate(self.nodes)}
        self.depends_on: Dict[str, Set[str]] = {n: set() for n in self.nodes}
        for dependent, dependency in edges:
            if dependent in self.depends_on and dependency in self.depends_on and dependent != dependency:
                self.depends_on[dependent].add(dependency)

    def levels(self) -> List[List[str]]:
        remaining = {n: len(deps) for n, deps in self.depends_on.items()}
        dependents: Dict[str, List[str]] = {n: [] for n in self.nodes}
        for n, deps in self.depends_on.items():
            for d in deps:
                dependents[d].append(n)

        levels: List[List[str]] = []
        ready = [n for n in self.nodes if remaining[n] == 0]
        placed = 0
        while ready:
            levels.append(ready)
            placed += len(ready)
            nxt: List[str] = []
            for n in ready:
                for child in dependents[n]:
                    remaining[child] -= 1
                    if remaining[child] == 0:
                        nxt.append(child)
            ready = sorted(nxt, key=self._order.__getitem__)

        if placed != len(self.nodes):
            cycle = self.find_cycle() or tuple(n for n in self.nodes if remaining[n] > 0)
            raise CyclicBindingDependencyError(
                f"Cyclic dependency between components: {' -> '.join(cycle + cycle[:1])}",
                details={"cycle": list(cycle)},
                hint="Remove one of the binds or references that close the cycle",
                cycle=cycle,
            )
        return levels

    def find_cycle(self) -> Optional[Tuple[str, ...]]:
        """Primeiro ciclo encontrado por DFS, em ordem de declaração."""
        WHITE, GREY, BLACK = 0, 1, 2
        color = {n: WHITE for n in self.nodes}
        stack: List[str] = []

        def visit(node: str) -> Optional[Tuple[str, ...]]:
            color[node] = GREY
            stack.append(node)
            for dep in sorted(self.depends_on[node], key=self._order.__getitem__):
                if color[dep] == GREY:
                    return tuple(stack[stack.index(dep):])
                if color[dep] == WHITE:
                    found = visit(dep)
                    if found:
                        return found
            stack.pop()
            color[node] = BLACK
            return None

        for n in self.nodes:
            if color[n] == WHITE:
                found = visit(n)
                if found:
                    return found
        return None

    def level_of(self) -> Dict[str, int]:
        return {name: i for i, level in enumerate(self.levels()) for name in level}
