"""
Validação de referências: alvos de bind (`to`/`select`) e `${ref:...}`.
"""

from .refs import ComponentRef
from .selectors import resolve_target
from .validator import ReferenceReport, ReferenceValidator

__all__ = ["ComponentRef", "ReferenceReport", "ReferenceValidator", "resolve_target"]
