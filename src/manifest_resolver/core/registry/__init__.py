"""
Registry estático de tipos de componente (`ComponentKind`) e catálogo padrão.
"""

from .catalog import BUILTIN_KINDS, default_registry
from .kinds import ComponentKind, ComponentRegistry, validate_kind

__all__ = [
    "BUILTIN_KINDS",
    "ComponentKind",
    "ComponentRegistry",
    "default_registry",
    "validate_kind",
]
