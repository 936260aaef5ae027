"""
Contrato do backend de síntese.

O resolver entrega a cada backend o tipo do componente, a configuração já
resolvida e as diretivas de binding; o backend devolve as capabilities que o
componente passa a fornecer e identificadores opacos dos constructs criados.
Backends reais (CDK, Terraform, ...) vivem fora deste pacote.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Protocol, runtime_checkable

from manifest_resolver.core.binding.strategy import BindingResult


@dataclass(frozen=True)
class SynthesisOutput:
    capabilities_provided: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    construct_handles: Dict[str, str] = field(default_factory=dict)


@runtime_checkable
class SynthesisBackend(Protocol):
    def synthesize(
        self,
        component_type: str,
        resolved_config: Dict[str, Any],
        binding_directives: BindingResult,
        *,
        component: str,
        service: str,
    ) -> SynthesisOutput:
        ...
