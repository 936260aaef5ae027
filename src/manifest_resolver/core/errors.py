"""
Manifest Resolver — Canonical Error Structures (v1)

Este módulo define o registro canônico de problemas (erros e avisos) produzido
pela resolução de um manifest. Erros fazem parte do contrato com a CLI e com
qualquer outro consumidor do plano, devendo ser:

- explícitos
- serializáveis
- classificados (erro do usuário vs. erro interno da plataforma)
- acionáveis

O mapeamento para exit codes pertence à CLI; aqui apenas classificamos.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class ErrorCategory(str, Enum):
    """
    Classificação de origem de uma falha.

    - USER: o manifest está errado (o autor do manifest corrige)
    - INTERNAL: a plataforma está errada (registry/plugin malformado, bug)
    """

    USER = "user"
    INTERNAL = "internal"


class Stage(str, Enum):
    """Estágios nomeados da resolução, usados no campo `stage` dos problemas."""

    PARSE = "parse"
    SCHEMA = "schema"
    HYDRATION = "hydration"
    REFERENCES = "references"
    CONFIG = "config"
    BINDING = "binding"
    GOVERNANCE = "governance"
    PLAN = "plan"
    ENGINE = "engine"


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ValidationIssue:
    """
    Registro canônico de um problema encontrado durante a resolução.

    Campos:
    - stage: estágio que detectou o problema (ver `Stage`)
    - path: localização no documento (notação `$.components[0].config`)
    - message: mensagem curta, humana e objetiva
    - severity: `error` ou `warning`
    - code: código estável do problema (não é texto livre)
    - category: `user` ou `internal`
    - details: dados estruturados para diagnóstico
    - hint: ação sugerida ao autor do manifest
    """

    stage: str
    path: str
    message: str
    severity: str = Severity.ERROR.value
    code: str = "MANIFEST_ERROR"
    category: str = ErrorCategory.USER.value
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR.value

    @property
    def is_internal(self) -> bool:
        return self.category == ErrorCategory.INTERNAL.value

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do problema."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo de códigos que não vêm de uma exceção tipada
# ---------------------------------------------------------------------------

ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"
SUPPRESSION_EXPIRED = "SUPPRESSION_EXPIRED"
SUPPRESSION_EXPIRING = "SUPPRESSION_EXPIRING"
PATCH_APPROVAL_MISSING = "PATCH_APPROVAL_MISSING"
POLICY_OVERRIDE_APPLIED = "POLICY_OVERRIDE_APPLIED"


def warning(
    *,
    stage: Stage,
    path: str,
    message: str,
    code: str,
    details: Optional[Dict[str, Any]] = None,
    hint: Optional[str] = None,
) -> ValidationIssue:
    return ValidationIssue(
        stage=stage.value,
        path=path,
        message=message,
        severity=Severity.WARNING.value,
        code=code,
        category=ErrorCategory.USER.value,
        details=dict(details or {}),
        hint=hint,
    )


def engine_execution_error(
    *,
    stage: str,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "This is a platform defect, not a manifest problem. Report it with the manifest that triggered it.",
) -> ValidationIssue:
    return ValidationIssue(
        stage=stage,
        path="$",
        message=exc_message or "Unexpected failure while resolving the manifest",
        severity=Severity.ERROR.value,
        code=ENGINE_EXECUTION_ERROR,
        category=ErrorCategory.INTERNAL.value,
        details={"exc_type": exc_type},
        hint=hint,
    )
