"""
# Pipeline de resolução

A resolução é modelada como um DAG explícito de estágios (Steps):

- **types**: `StepStatus`, `StepKind`, `StepResult`
- **step**: `Step` (Protocol), contrato mínimo de um estágio
- **context**: `ResolutionContext` (artefatos, eventos, avisos)
- **registry**: `StepRegistry`, unicidade de `step.id`

Steps não conhecem o Engine nem o planner; a comunicação entre eles ocorre
apenas via contexto.
"""

from .context import ResolutionContext
from .registry import DuplicateStepIdError, StepRegistry
from .step import Step
from .types import StepKind, StepResult, StepStatus

__all__ = [
    "DuplicateStepIdError",
    "ResolutionContext",
    "Step",
    "StepKind",
    "StepRegistry",
    "StepResult",
    "StepStatus",
]
