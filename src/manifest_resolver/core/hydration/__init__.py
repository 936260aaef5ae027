"""
Hidratação de contexto: interpolação de tokens e mapas por ambiente.
"""

from .hydrator import COMPONENT_BLOCKS, ContextHydrator, HydrationResult, RefOccurrence
from .interpolation import interpolate

__all__ = ["COMPONENT_BLOCKS", "ContextHydrator", "HydrationResult", "RefOccurrence", "interpolate"]
