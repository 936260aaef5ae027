# src/manifest_resolver/core/binding/strategy.py
"""
Contrato de estratégias de binding.

Uma estratégia sabe ligar um tipo de componente de origem a uma capability
de destino. Ela declara o que suporta (`compatibility_matrix`), responde se
aceita um par (`can_handle`) e produz um `BindingResult` puro: variáveis de
ambiente, políticas IAM, regras de rede e configuração adicional.

Estratégias não têm estado e não fazem I/O; toda informação sobre o alvo vem
do `CapabilityRecord` já publicado.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from manifest_resolver.core.exceptions import (
    DuplicateEnvironmentVariableError,
    ManifestException,
    UnsupportedAccessLevelError,
)
from manifest_resolver.core.manifest.model import BindDirective, ComplianceFramework, ComponentSpec

from .capabilities import CapabilityRecord


@dataclass(frozen=True)
class BindingContext:
    source: ComponentSpec
    source_config: Dict[str, Any]
    target: ComponentSpec
    target_config: Dict[str, Any]
    directive: BindDirective
    capability: CapabilityRecord
    compliance_framework: ComplianceFramework
    environment: str
    region: str = "us-east-1"
    account: str = "000000000000"

    @property
    def path(self) -> str:
        return self.source.bind_path(self.directive)


@dataclass(frozen=True)
class BindingResult:
    env_vars: Dict[str, str] = field(default_factory=dict)
    iam_policies: Tuple[Dict[str, Any], ...] = ()
    network_config: Dict[str, Any] = field(default_factory=dict)
    additional_config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "envVars": dict(sorted(self.env_vars.items())),
            "iamPolicies": [dict(p) for p in self.iam_policies],
            "networkConfig": dict(self.network_config),
            "additionalConfig": dict(self.additional_config),
        }


@dataclass(frozen=True)
class CompatibilityEntry:
    source_type: str
    target_type: str
    capability: str
    supported_access: Tuple[str, ...]
    description: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceType": self.source_type,
            "targetType": self.target_type,
            "capability": self.capability,
            "supportedAccess": list(self.supported_access),
            "description": self.description,
        }


class BinderStrategy:
    """
    Base das estratégias concretas.

    Subclasses definem `SOURCE_TYPES`, `TARGET_TYPES`, `CAPABILITY`,
    `SUPPORTED_ACCESS`, `DEFAULT_ENV` (campo lógico → nome padrão da variável)
    e `ACTIONS` (ações IAM por nível de acesso). `readwrite` é a união de
    `read` e `write`; `admin` acrescenta `ADMIN_ACTIONS` a ela.
    """

    SOURCE_TYPES: Tuple[str, ...] = ()
    TARGET_TYPES: Tuple[str, ...] = ()
    CAPABILITY: str = ""
    SUPPORTED_ACCESS: Tuple[str, ...] = ()
    DEFAULT_ENV: Dict[str, str] = {}
    DESCRIPTION: str = ""
    IAM_SERVICE: str = ""
    MONITORING_ACTIONS: Tuple[str, ...] = ()
    ACTIONS: Dict[str, Tuple[str, ...]] = {}
    ADMIN_ACTIONS: Tuple[str, ...] = ()
    ARN_FIELD: str = ""

    @property
    def name(self) -> str:
        return type(self).__name__

    def can_handle(self, source_type: str, capability: str) -> bool:
        return source_type in self.SOURCE_TYPES and capability == self.CAPABILITY

    def compatibility_matrix(self) -> List[CompatibilityEntry]:
        return [
            CompatibilityEntry(
                source_type=source,
                target_type=target,
                capability=self.CAPABILITY,
                supported_access=self.SUPPORTED_ACCESS,
                description=self.DESCRIPTION,
            )
            for source in self.SOURCE_TYPES
            for target in self.TARGET_TYPES
        ]

    def check_access(self, directive: BindDirective, path: str) -> None:
        if directive.access not in self.SUPPORTED_ACCESS:
            raise UnsupportedAccessLevelError(
                f"{self.name} does not support access '{directive.access}' for {self.CAPABILITY}",
                path=f"{path}.access",
                details={
                    "access": directive.access,
                    "supported": list(self.SUPPORTED_ACCESS),
                    "strategy": self.name,
                },
                hint=f"Use one of: {', '.join(self.SUPPORTED_ACCESS)}",
            )

    def bind(self, context: BindingContext) -> BindingResult:
        self.check_access(context.directive, context.path)
        return BindingResult(
            env_vars=self.env_vars(context),
            iam_policies=tuple(self.permissions(context) + self.compliance_statements(context)),
            network_config=self.network(context),
            additional_config=self.additional(context),
        )

    # -- partes que as subclasses ajustam ---------------------------------

    def env_vars(self, context: BindingContext) -> Dict[str, str]:
        data = context.capability.data
        remap = context.directive.env
        return {
            remap.get(field_name, default): str(data[field_name])
            for field_name, default in self.DEFAULT_ENV.items()
            if field_name in data
        }

    def actions_for(self, access: str) -> List[str]:
        read = list(self.ACTIONS.get("read", ()))
        write = list(self.ACTIONS.get("write", ()))
        if access == "read":
            chosen = read
        elif access == "write":
            chosen = write
        else:
            chosen = read + write
            if access == "admin":
                chosen += list(self.ADMIN_ACTIONS)
        return sorted(set(chosen))

    def resources(self, context: BindingContext) -> List[str]:
        return [self.resource_arn(context)]

    def permissions(self, context: BindingContext) -> List[Dict[str, Any]]:
        actions = self.actions_for(context.directive.access)
        if not actions:
            return []
        return [statement("Allow", actions, self.resources(context))]

    def network(self, context: BindingContext) -> Dict[str, Any]:
        return {}

    def additional(self, context: BindingContext) -> Dict[str, Any]:
        return {}

    def resource_arn(self, context: BindingContext) -> str:
        if self.ARN_FIELD:
            return str(context.capability.data.get(self.ARN_FIELD, "*"))
        return "*"

    def compliance_statements(self, context: BindingContext) -> List[Dict[str, Any]]:
        framework = context.compliance_framework
        if not framework.is_fedramp:
            return []
        out: List[Dict[str, Any]] = [
            statement(
                "Allow",
                self.MONITORING_ACTIONS,
                [self.resource_arn(context)],
                {
                    "StringEquals": {"aws:RequestedRegion": context.region}
                },
            )
        ]
        if framework is ComplianceFramework.FEDRAMP_HIGH:
            out.append(
                statement(
                    "Deny",
                    [f"{self.IAM_SERVICE}:*"],
                    ["*"],
                    {
                        "StringNotEquals": {
                            "aws:SourceVpce": context.directive.options.get("vpcEndpoint") or "vpce-*"
                        }
                    },
                )
            )
        return out


def statement(
    effect: str,
    actions: Sequence[str],
    resources: Sequence[str],
    conditions: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Statement IAM no formato de policy document (condição de transporte sempre presente)."""
    cond = dict(conditions or {})
    if effect == "Allow":
        equals = dict(cond.get("Bool") or {})
        equals.setdefault("aws:SecureTransport", "true")
        cond["Bool"] = equals
    return {
        "Effect": effect,
        "Action": sorted(actions),
        "Resource": list(resources),
        "Condition": cond,
    }


def merge_results(
    source: ComponentSpec,
    results: Sequence[Tuple[BindDirective, BindingResult]],
) -> Tuple[BindingResult, List[ManifestException]]:
    """
    Junta os resultados de todos os binds de um componente, na ordem dos binds.

    Uma mesma variável de ambiente produzida por dois binds é erro; o autor
    resolve com `env:` no bind.
    """
    env: Dict[str, str] = {}
    owner: Dict[str, int] = {}
    policies: List[Dict[str, Any]] = []
    network: Dict[str, Any] = {}
    additional: Dict[str, Any] = {}
    errors: List[ManifestException] = []

    for directive, result in results:
        for key, value in result.env_vars.items():
            if key in env:
                errors.append(
                    DuplicateEnvironmentVariableError(
                        f"Environment variable '{key}' is produced by binds "
                        f"{owner[key]} and {directive.index} of component '{source.name}'",
                        path=f"{source.bind_path(directive)}.env",
                        details={"variable": key, "binds": [owner[key], directive.index]},
                        hint="Rename one of them with the bind 'env' mapping",
                    )
                )
                continue
            env[key] = value
            owner[key] = directive.index
        policies.extend(result.iam_policies)
        for key, value in result.network_config.items():
            network.setdefault(key, [])
            network[key].extend(value if isinstance(value, list) else [value])
        additional.update(result.additional_config)

    merged = BindingResult(
        env_vars=env,
        iam_policies=tuple(policies),
        network_config=network,
        additional_config=additional,
    )
    return merged, errors
