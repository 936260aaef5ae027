"""
Seam de síntese: o resolver produz o plano; backends transformam o plano em
recursos. Apenas o backend dry-run acompanha o pacote.
"""

from .backend import SynthesisBackend, SynthesisOutput
from .dry_run import DryRunSynthesizer

__all__ = ["DryRunSynthesizer", "SynthesisBackend", "SynthesisOutput"]
