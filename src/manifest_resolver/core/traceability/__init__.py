"""
Rastreabilidade: o plano resolvido e sua persistência.
"""

from .plan import PLAN_VERSION, ComponentPlan, ResolvedPlan, load_plan, save_plan

__all__ = ["PLAN_VERSION", "ComponentPlan", "ResolvedPlan", "load_plan", "save_plan"]
