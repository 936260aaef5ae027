"""
Máquina de estados de um bind e seu rastro auditável.

    UNRESOLVED → TARGET_RESOLVED → STRATEGY_MATCHED → BOUND
         ↘               ↘                  ↘
                          FAILED

Qualquer estado não terminal pode ir para FAILED.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from manifest_resolver.core.exceptions import ManifestException


class BindState(str, Enum):
    UNRESOLVED = "UNRESOLVED"
    TARGET_RESOLVED = "TARGET_RESOLVED"
    STRATEGY_MATCHED = "STRATEGY_MATCHED"
    BOUND = "BOUND"
    FAILED = "FAILED"


_NEXT = {
    BindState.UNRESOLVED: BindState.TARGET_RESOLVED,
    BindState.TARGET_RESOLVED: BindState.STRATEGY_MATCHED,
    BindState.STRATEGY_MATCHED: BindState.BOUND,
}


@dataclass
class BindTrace:
    source: str
    bind_index: int
    capability: str
    access: str
    state: BindState = BindState.UNRESOLVED
    target: Optional[str] = None
    strategy: Optional[str] = None
    history: List[str] = field(default_factory=lambda: [BindState.UNRESOLVED.value])
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def _move(self, state: BindState) -> None:
        if _NEXT.get(self.state) is not state:
            raise RuntimeError(f"Invalid bind transition {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state.value)

    def target_resolved(self, target: str) -> None:
        self._move(BindState.TARGET_RESOLVED)
        self.target = target

    def strategy_matched(self, strategy: str) -> None:
        self._move(BindState.STRATEGY_MATCHED)
        self.strategy = strategy

    def bound(self) -> None:
        self._move(BindState.BOUND)

    def fail(self, exc: ManifestException) -> None:
        if self.state in (BindState.BOUND, BindState.FAILED):
            raise RuntimeError(f"Cannot fail a bind in terminal state {self.state.value}")
        self.state = BindState.FAILED
        self.history.append(BindState.FAILED.value)
        self.error_code = exc.code
        self.error_message = exc.message

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "bindIndex": self.bind_index,
            "capability": self.capability,
            "access": self.access,
            "state": self.state.value,
            "target": self.target,
            "strategy": self.strategy,
            "history": list(self.history),
        }
        if self.error_code:
            out["error"] = {"code": self.error_code, "message": self.error_message}
        return out
