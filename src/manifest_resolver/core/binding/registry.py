"""
Registro de estratégias de binding.

A busca exige exatamente uma estratégia aceitando o par
(tipo de origem, capability): nenhuma → `NoCompatibleBinderError`, mais de
uma → `AmbiguousBinderError`. A ordem de registro nunca desempata.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from manifest_resolver.core.exceptions import (
    AmbiguousBinderError,
    NoCompatibleBinderError,
    RegistryDefinitionError,
)

from .strategy import BinderStrategy, CompatibilityEntry


class BinderRegistry:
    def __init__(self, strategies: Optional[Iterable[BinderStrategy]] = None):
        self._strategies: List[BinderStrategy] = []
        for strategy in strategies or ():
            self.register(strategy)

    def register(self, strategy: BinderStrategy) -> None:
        if not strategy.compatibility_matrix():
            raise RegistryDefinitionError(
                f"Binder strategy '{strategy.name}' declares an empty compatibility matrix",
                details={"strategy": strategy.name},
            )
        if any(s.name == strategy.name for s in self._strategies):
            raise RegistryDefinitionError(
                f"Binder strategy '{strategy.name}' is already registered",
                details={"strategy": strategy.name},
            )
        self._strategies.append(strategy)

    def strategies(self) -> List[BinderStrategy]:
        return list(self._strategies)

    def find(self, source_type: str, capability: str, *, path: str = "$") -> BinderStrategy:
        matches = [s for s in self._strategies if s.can_handle(source_type, capability)]
        if len(matches) == 1:
            return matches[0]
        details = {"source_type": source_type, "capability": capability}
        if not matches:
            supported = sorted({e.capability for e in self.supported_bindings(source_type)})
            raise NoCompatibleBinderError(
                f"No binder can connect '{source_type}' to capability '{capability}'",
                path=path,
                details=dict(details, supported_capabilities=supported),
                hint=(
                    f"'{source_type}' can bind to: {', '.join(supported)}"
                    if supported
                    else f"'{source_type}' cannot declare binds"
                ),
            )
        raise AmbiguousBinderError(
            f"{len(matches)} binders accept '{source_type}' -> '{capability}': "
            f"{', '.join(s.name for s in matches)}",
            path=path,
            details=dict(details, strategies=[s.name for s in matches]),
        )

    def supported_bindings(self, source_type: str) -> List[CompatibilityEntry]:
        return [
            entry
            for strategy in self._strategies
            for entry in strategy.compatibility_matrix()
            if entry.source_type == source_type
        ]

    def full_compatibility_matrix(self) -> List[CompatibilityEntry]:
        return [entry for strategy in self._strategies for entry in strategy.compatibility_matrix()]


def default_binder_registry() -> BinderRegistry:
    from .strategies import BUILTIN_STRATEGIES

    return BinderRegistry(cls() for cls in BUILTIN_STRATEGIES)
