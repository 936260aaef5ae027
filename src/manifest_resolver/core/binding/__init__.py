"""
Binding: capabilities publicadas, estratégias de bind e resolução em níveis.
"""

from .capabilities import CapabilityRecord, CapabilityRegistry
from .graph import DependencyGraph
from .registry import BinderRegistry, default_binder_registry
from .resolver import BinderResolver, BindingReport, ComponentBinding, substitute_refs
from .strategy import BinderStrategy, BindingContext, BindingResult, CompatibilityEntry, merge_results
from .trace import BindState, BindTrace

__all__ = [
    "BindState",
    "BindTrace",
    "BinderRegistry",
    "BinderResolver",
    "BinderStrategy",
    "BindingContext",
    "BindingReport",
    "BindingResult",
    "CapabilityRecord",
    "CapabilityRegistry",
    "CompatibilityEntry",
    "ComponentBinding",
    "DependencyGraph",
    "default_binder_registry",
    "merge_results",
    "substitute_refs",
]
