"""
DryRunSynthesizer — backend determinístico e sem I/O.

Renderiza os templates de capability do tipo (`{service}`, `{component}`,
`{region}`, `{account}`, `{config[chave]}`) e devolve handles estáveis. É o
backend usado por `plan` e pelos testes.
"""

from __future__ import annotations

from typing import Any, Dict

from manifest_resolver.core.binding.strategy import BindingResult
from manifest_resolver.core.exceptions import RegistryDefinitionError
from manifest_resolver.core.registry.kinds import ComponentRegistry

from .backend import SynthesisOutput


class DryRunSynthesizer:
    def __init__(self, registry: ComponentRegistry, *, region: str = "us-east-1", account: str = "000000000000"):
        self.registry = registry
        self.region = region
        self.account = account

    def synthesize(
        self,
        component_type: str,
        resolved_config: Dict[str, Any],
        binding_directives: BindingResult,
        *,
        component: str,
        service: str,
    ) -> SynthesisOutput:
        kind = self.registry.get(component_type)
        if kind is None:
            raise RegistryDefinitionError(
                f"Cannot synthesize unregistered component type '{component_type}'",
                details={"component_type": component_type},
            )

        values = {
            "service": service,
            "component": component,
            "region": self.region,
            "account": self.account,
            "config": resolved_config,
        }
        capabilities: Dict[str, Dict[str, Any]] = {}
        for capability in kind.provides:
            template = kind.capability_templates[capability]
            try:
                capabilities[capability] = {
                    key: pattern.format(**values) for key, pattern in sorted(template.items())
                }
            except (KeyError, IndexError) as e:
                raise RegistryDefinitionError(
                    f"Capability template {capability} of '{component_type}' references a "
                    f"value the resolved config does not have: {e}",
                    details={"component_type": component_type, "capability": capability},
                ) from e

        handles = {"main": f"{component_type}/{service}-{component}"}
        if kind.compute:
            handles["role"] = f"arn:aws:iam::{self.account}:role/{service}-{component}-role"
            if binding_directives.iam_policies:
                handles["policy"] = f"{service}-{component}-bindings"
        return SynthesisOutput(capabilities_provided=capabilities, construct_handles=handles)
