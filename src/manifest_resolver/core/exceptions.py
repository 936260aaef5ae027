"""
Manifest Resolver — Canonical Exceptions (v1)

Este módulo define as exceções tipadas levantadas durante a resolução de um
manifest.

Objetivo:
- Permitir que estágios e resolvers levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para `ValidationIssue`
- Evitar ValueError/RuntimeError genéricos em guardrails críticos

Regras:
- Toda exceção carrega `path` (onde está o problema no manifest) e dados
  estruturados em `details`.
- `CODE` é estável; `CATEGORY` diz se a culpa é do manifest (user) ou da
  plataforma (internal).
- Dentro de um estágio, várias exceções são agregadas em `StageFailure`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from .errors import ErrorCategory, Severity, ValidationIssue


@dataclass(eq=False)
class ManifestException(Exception):
    """Base class para exceções da resolução de manifest.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    path: str = "$"
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    CODE: ClassVar[str] = "MANIFEST_ERROR"
    CATEGORY: ClassVar[ErrorCategory] = ErrorCategory.USER

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    @property
    def code(self) -> str:
        return self.CODE

    @property
    def category(self) -> ErrorCategory:
        return self.CATEGORY

    def to_issue(self, stage: str) -> ValidationIssue:
        return ValidationIssue(
            stage=stage,
            path=self.path,
            message=self.message,
            severity=Severity.ERROR.value,
            code=self.code,
            category=self.category.value,
            details=dict(self.details),
            hint=self.hint,
        )


# ---------------------------------------------------------------------------
# Parse / Schema / Hydration
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class ParseError(ManifestException):
    """Texto do manifest não é um documento YAML/JSON válido."""

    line: Optional[int] = None
    column: Optional[int] = None

    CODE: ClassVar[str] = "PARSE_ERROR"


class ManifestFileError(ManifestException):
    """Arquivo de manifest (ou arquivo referenciado via `$ref`) inacessível ou inválido."""

    CODE: ClassVar[str] = "MANIFEST_FILE_ERROR"


@dataclass(eq=False)
class SchemaViolation(ManifestException):
    """Uma regra do schema composto foi violada em `path`."""

    rule: str = ""
    pointer: str = ""

    CODE: ClassVar[str] = "SCHEMA_VIOLATION"


@dataclass(eq=False)
class HydrationError(ManifestException):
    """Token de interpolação não resolvido ou malformado."""

    token: Optional[str] = None

    CODE: ClassVar[str] = "HYDRATION_ERROR"


# ---------------------------------------------------------------------------
# Referências e semântica
# ---------------------------------------------------------------------------

class DuplicateComponentError(ManifestException):
    """Dois componentes declarados com o mesmo nome."""

    CODE: ClassVar[str] = "DUPLICATE_COMPONENT"


class ComponentReferenceError(ManifestException):
    """`to:` ou `${ref:...}` aponta para um componente inexistente."""

    CODE: ClassVar[str] = "REFERENCE_ERROR"


@dataclass(eq=False)
class AmbiguousSelectorError(ManifestException):
    """`select:` não resolveu para exatamente um componente.

    `kind` é `NoMatch` (zero candidatos) ou `MultipleMatches` (mais de um).
    """

    kind: str = "NoMatch"
    candidates: Tuple[str, ...] = ()

    NO_MATCH: ClassVar[str] = "NoMatch"
    MULTIPLE_MATCHES: ClassVar[str] = "MultipleMatches"

    @property
    def code(self) -> str:
        if self.kind == self.MULTIPLE_MATCHES:
            return "SELECTOR_MULTIPLE_MATCHES"
        return "SELECTOR_NO_MATCH"


class CapabilityNotProvidedError(ManifestException):
    """O tipo do componente alvo não fornece a capability pedida."""

    CODE: ClassVar[str] = "CAPABILITY_NOT_PROVIDED"


# ---------------------------------------------------------------------------
# Binding
# ---------------------------------------------------------------------------

class NoCompatibleBinderError(ManifestException):
    """Nenhuma estratégia aceita o par (sourceType, capability)."""

    CODE: ClassVar[str] = "NO_COMPATIBLE_BINDER"


class AmbiguousBinderError(ManifestException):
    """Mais de uma estratégia aceita o mesmo par (sourceType, capability)."""

    CODE: ClassVar[str] = "AMBIGUOUS_BINDER"


class UnsupportedAccessLevelError(ManifestException):
    """A estratégia não suporta o nível de acesso pedido."""

    CODE: ClassVar[str] = "UNSUPPORTED_ACCESS_LEVEL"


class DuplicateEnvironmentVariableError(ManifestException):
    """Dois binds do mesmo componente produzem a mesma variável de ambiente."""

    CODE: ClassVar[str] = "DUPLICATE_ENVIRONMENT_VARIABLE"


@dataclass(eq=False)
class CyclicBindingDependencyError(ManifestException):
    """O grafo de binds contém um ciclo."""

    cycle: Tuple[str, ...] = ()

    CODE: ClassVar[str] = "CYCLIC_BINDING_DEPENDENCY"


class MissingCapabilityError(ManifestException):
    """Capability consumida sem produtor registrado."""

    CODE: ClassVar[str] = "MISSING_CAPABILITY"


# ---------------------------------------------------------------------------
# Governança
# ---------------------------------------------------------------------------

class SuppressionValidationError(ManifestException):
    """Entrada de supressão incompleta, inválida ou expirada (fedramp-high)."""

    CODE: ClassVar[str] = "SUPPRESSION_INVALID"


class PatchValidationError(ManifestException):
    """Registro de patch (escape hatch) incompleto."""

    CODE: ClassVar[str] = "PATCH_INVALID"


class GovernanceApprovalRequiredError(ManifestException):
    """Modificação via escape hatch sem aprovação manual registrada."""

    CODE: ClassVar[str] = "GOVERNANCE_APPROVAL_REQUIRED"


# ---------------------------------------------------------------------------
# Erros internos (plataforma)
# ---------------------------------------------------------------------------

class RegistryDefinitionError(ManifestException):
    """Entrada do registry de componentes/binders malformada (bug de plugin)."""

    CODE: ClassVar[str] = "REGISTRY_DEFINITION_ERROR"
    CATEGORY: ClassVar[ErrorCategory] = ErrorCategory.INTERNAL


class CapabilityConflictError(ManifestException):
    """Um produtor tentou publicar a mesma capability duas vezes."""

    CODE: ClassVar[str] = "CAPABILITY_CONFLICT"
    CATEGORY: ClassVar[ErrorCategory] = ErrorCategory.INTERNAL


# ---------------------------------------------------------------------------
# Agregação
# ---------------------------------------------------------------------------

@dataclass(eq=False)
class StageFailure(ManifestException):
    """Falha de um estágio com todas as violações acumuladas nele."""

    errors: List[ManifestException] = field(default_factory=list)

    CODE: ClassVar[str] = "STAGE_FAILED"

    @classmethod
    def collect(cls, stage: str, errors: Sequence[ManifestException]) -> "StageFailure":
        return cls(
            message=f"{stage} stage failed with {len(errors)} error(s)",
            errors=list(errors),
        )


class SchemaValidationError(StageFailure):
    """Falha do estágio de schema; `errors` contém um `SchemaViolation` por caminho."""


class ManifestResolutionError(Exception):
    """Levantada por `ResolutionResult.raise_for_errors()`."""

    def __init__(self, issues: Sequence[ValidationIssue]):
        self.issues = list(issues)
        first = self.issues[0].message if self.issues else "manifest resolution failed"
        extra = f" (+{len(self.issues) - 1} more)" if len(self.issues) > 1 else ""
        super().__init__(first + extra)
