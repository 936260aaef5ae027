# src/manifest_resolver/core/pipeline/context.py
"""
Contexto de uma resolução.

O `ResolutionContext` é o único meio de troca de estado entre estágios:
    - artifact store explícito (documento parseado, manifest, configs, ...)
    - log estruturado de eventos (`ctx.log`)
    - avisos por estágio (`ctx.add_warning`)

Não existe estado global: cada resolução tem seu próprio contexto.

Os eventos carregam um número de sequência em vez de horário, para que a
mesma entrada produza o mesmo log.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from manifest_resolver.core.errors import ValidationIssue


@dataclass
class ResolutionContext:
    """
    Contexto compartilhado de uma resolução.

    Campos:
        - resolution_id: identificador determinístico da resolução
        - environment: ambiente alvo
        - settings: settings do resolver já resolvidos
        - as_of: data de referência para prazos de governança
        - text: texto do manifest
    """

    resolution_id: str
    environment: str
    settings: Dict[str, Any]
    as_of: date
    text: str = ""
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[ValidationIssue]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    def setting(self, section: str, key: str, default: Any = None) -> Any:
        block = (self.settings or {}).get(section)
        if not isinstance(block, dict):
            return default
        value = block.get(key)
        return default if value is None else value

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        with self._lock:
            event = {
                "resolution_id": self.resolution_id,
                "seq": len(self.events),
                "step_id": step_id,
                "level": level,
                "message": message,
            }
            event.update(extra)
            self.events.append(event)

    def add_warning(self, *, step_id: str, issue: ValidationIssue) -> None:
        with self._lock:
            self.warnings.setdefault(step_id, []).append(issue)

    def all_warnings(self) -> List[ValidationIssue]:
        return [w for step_warnings in self.warnings.values() for w in step_warnings]
