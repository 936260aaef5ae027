"""
Engine da resolução.

    - planner  → ordem topológica determinística dos estágios
    - engine   → execução fail-fast com mapeamento de exceções para problemas
    - parallel → fan-out com barreira usado dentro dos estágios

Planejamento e execução são responsabilidades separadas; cada estágio roda
no máximo uma vez por resolução.
"""

from .engine import Engine, RunResult, exception_to_issues
from .parallel import fan_out
from .planner import CycleDetectedError, UnknownDependencyError, plan_execution

__all__ = [
    "CycleDetectedError",
    "Engine",
    "RunResult",
    "UnknownDependencyError",
    "exception_to_issues",
    "fan_out",
    "plan_execution",
]
