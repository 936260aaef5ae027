"""
Registro de capabilities publicadas pelos componentes sintetizados.

Cada par (produtor, capability) é escrito uma única vez. O registro é
preenchido nível a nível durante a síntese e consultado pelos binds dos
níveis seguintes; `freeze()` encerra a fase de escrita.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from manifest_resolver.core.exceptions import CapabilityConflictError, MissingCapabilityError


@dataclass(frozen=True)
class CapabilityRecord:
    producer: str
    capability: str
    component_type: str
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "producer": self.producer,
            "capability": self.capability,
            "componentType": self.component_type,
            "data": dict(sorted(self.data.items())),
        }


class CapabilityRegistry:
    def __init__(self):
        self._records: Dict[Tuple[str, str], CapabilityRecord] = {}
        self._frozen = False
        self._lock = threading.Lock()

    @property
    def frozen(self) -> bool:
        return self._frozen

    def publish(self, record: CapabilityRecord) -> None:
        key = (record.producer, record.capability)
        with self._lock:
            if self._frozen:
                raise CapabilityConflictError(
                    f"Capability registry is frozen; cannot publish {record.capability} "
                    f"for '{record.producer}'",
                    details={"producer": record.producer, "capability": record.capability},
                )
            if key in self._records:
                raise CapabilityConflictError(
                    f"Capability {record.capability} of '{record.producer}' was already published",
                    details={"producer": record.producer, "capability": record.capability},
                )
            self._records[key] = record

    def lookup(self, producer: str, capability: str) -> CapabilityRecord:
        record = self._records.get((producer, capability))
        if record is None:
            raise MissingCapabilityError(
                f"No capability {capability} published by '{producer}'",
                details={"producer": producer, "capability": capability},
            )
        return record

    def for_producer(self, producer: str) -> List[CapabilityRecord]:
        return [r for (p, _), r in sorted(self._records.items()) if p == producer]

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    def __len__(self) -> int:
        return len(self._records)
