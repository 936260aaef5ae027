# src/manifest_resolver/core/pipeline/types.py
"""
Tipos canônicos dos estágios de resolução.

Componentes principais:
    - StepStatus → estado final de um estágio (SUCCESS, SKIPPED, FAILED)
    - StepKind   → classificação semântica do estágio
    - StepResult → resultado imutável produzido por um estágio

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável
    - Nenhuma lógica de execução vive neste módulo
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from manifest_resolver.core.errors import ValidationIssue


class StepKind(str, Enum):
    """
    Tipos semânticos de estágio.

    - VALIDATE: verifica o manifest sem transformá-lo (schema, referências, governança)
    - TRANSFORM: produz uma nova forma do documento (parse, hidratação)
    - RESOLVE: calcula resultados derivados (configuração, binds)
    - ASSEMBLE: monta o artefato final (plano)

    O tipo é informativo; o Engine não decide nada com base nele.
    """

    VALIDATE = "validate"
    TRANSFORM = "transform"
    RESOLVE = "resolve"
    ASSEMBLE = "assemble"


class StepStatus(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um estágio.

    Campos:
        - step_id: identificador do estágio
        - kind: tipo semântico
        - status: estado final
        - summary: resumo textual
        - metrics: contagens produzidas pelo estágio
        - warnings: avisos não fatais (`ValidationIssue` com severity warning)
        - errors: problemas que fizeram o estágio falhar
        - payload: dados adicionais livres
    """

    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[ValidationIssue] = field(default_factory=list)
    errors: List[ValidationIssue] = field(default_factory=list)
    payload: Dict[str, Any] = field(default_factory=dict)
