# src/manifest_resolver/core/pipeline/step.py
"""
Contrato canônico de um estágio de resolução.

Um Step é a menor unidade executável da resolução: lê o que precisa do
`ResolutionContext`, grava seus artefatos nele e devolve um `StepResult`.

Princípios:
    - Steps não conhecem o Engine nem o planner
    - Dependências são declaradas em `depends_on`
    - Falha é sinalizada levantando `ManifestException` (ou `StageFailure`
      com todas as violações do estágio); o Engine faz o mapeamento para
      `ValidationIssue`
    - Conformidade por duck typing (@runtime_checkable)
"""

from __future__ import annotations

from typing import List, Protocol, runtime_checkable

from .context import ResolutionContext
from .types import StepKind, StepResult


@runtime_checkable
class Step(Protocol):
    """
    Atributos obrigatórios:
        - id: identificador único e estável (`manifest.parse`, ...)
        - kind: classificação semântica (`StepKind`)
        - stage: valor de `Stage` usado no campo `stage` dos problemas
        - depends_on: ids dos estágios dos quais depende
    """

    id: str
    kind: StepKind
    stage: str
    depends_on: List[str]

    def run(self, ctx: ResolutionContext) -> StepResult:
        """Executa o estágio uma única vez usando exclusivamente o contexto."""
        ...
