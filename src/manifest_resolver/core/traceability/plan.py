# src/manifest_resolver/core/traceability/plan.py
"""
ResolvedPlan v1 — artefato final da resolução.

O plano consolida, por componente, a configuração resolvida com procedência,
o rastro de cada bind, o resultado de binding, as capabilities publicadas e
os valores de `${ref}`; e, para o serviço, o ambiente, o framework de
compliance, a ordem de síntese em níveis, a governança e os avisos.

Decisões arquiteturais:
    - Serialização JSON canônica (chaves ordenadas): a mesma entrada produz
      bytes idênticos
    - `plan_hash` é o SHA-256 dessa serialização
    - `from_dict` é permissivo e estrutural (round-trip com `to_dict`)

Limites explícitos:
    - Não executa síntese real
    - Não persiste nada implicitamente (`save_plan` é explícito)
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from manifest_resolver.core.config.hashing import canonical_json


PLAN_VERSION = "1"


@dataclass
class ComponentPlan:
    name: str
    type: str
    level: int
    config: Dict[str, Any]
    provenance: Dict[str, str] = field(default_factory=dict)
    config_hash: str = ""
    labels: Dict[str, str] = field(default_factory=dict)
    binds: List[Dict[str, Any]] = field(default_factory=list)
    binding: Dict[str, Any] = field(default_factory=dict)
    capabilities: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    construct_handles: Dict[str, str] = field(default_factory=dict)
    refs: Dict[str, Any] = field(default_factory=dict)
    overrides: Dict[str, Any] = field(default_factory=dict)
    policy: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.type,
            "level": self.level,
            "labels": dict(self.labels),
            "config": self.config,
            "provenance": dict(self.provenance),
            "configHash": self.config_hash,
            "binds": [dict(b) for b in self.binds],
            "binding": dict(self.binding),
            "capabilities": {k: dict(v) for k, v in self.capabilities.items()},
            "constructHandles": dict(self.construct_handles),
            "refs": dict(self.refs),
            "overrides": dict(self.overrides),
            "policy": dict(self.policy),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ComponentPlan":
        return cls(
            name=data["name"],
            type=data["type"],
            level=int(data.get("level", 0)),
            config=dict(data.get("config") or {}),
            provenance=dict(data.get("provenance") or {}),
            config_hash=data.get("configHash", ""),
            labels=dict(data.get("labels") or {}),
            binds=[dict(b) for b in data.get("binds") or []],
            binding=dict(data.get("binding") or {}),
            capabilities={k: dict(v) for k, v in (data.get("capabilities") or {}).items()},
            construct_handles=dict(data.get("constructHandles") or {}),
            refs=dict(data.get("refs") or {}),
            overrides=dict(data.get("overrides") or {}),
            policy=dict(data.get("policy") or {}),
        )


@dataclass
class ResolvedPlan:
    service: str
    owner: str
    environment: str
    compliance_framework: str
    components: List[ComponentPlan] = field(default_factory=list)
    synthesis_order: List[List[str]] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)
    governance: Dict[str, Any] = field(default_factory=dict)
    warnings: List[Dict[str, Any]] = field(default_factory=list)
    deployable: bool = True

    def component(self, name: str) -> Optional[ComponentPlan]:
        for c in self.components:
            if c.name == name:
                return c
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": PLAN_VERSION,
            "service": self.service,
            "owner": self.owner,
            "environment": self.environment,
            "complianceFramework": self.compliance_framework,
            "labels": dict(self.labels),
            "components": [c.to_dict() for c in self.components],
            "synthesisOrder": [list(level) for level in self.synthesis_order],
            "governance": dict(self.governance),
            "warnings": [dict(w) for w in self.warnings],
            "deployable": self.deployable,
        }

    def to_json(self, *, indent: Optional[int] = None) -> str:
        if indent is None:
            return canonical_json(self.to_dict())
        return json.dumps(self.to_dict(), sort_keys=True, indent=indent, ensure_ascii=False)

    @property
    def plan_hash(self) -> str:
        return hashlib.sha256(canonical_json(self.to_dict()).encode("utf-8")).hexdigest()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResolvedPlan":
        return cls(
            service=data["service"],
            owner=data.get("owner", ""),
            environment=data["environment"],
            compliance_framework=data["complianceFramework"],
            components=[ComponentPlan.from_dict(c) for c in data.get("components") or []],
            synthesis_order=[list(level) for level in data.get("synthesisOrder") or []],
            labels=dict(data.get("labels") or {}),
            governance=dict(data.get("governance") or {}),
            warnings=[dict(w) for w in data.get("warnings") or []],
            deployable=bool(data.get("deployable", True)),
        )


def save_plan(plan: ResolvedPlan, path: Path) -> None:
    """Persiste o plano em JSON (chaves ordenadas, indentado)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(plan.to_json(indent=2) + "\n", encoding="utf-8")


def load_plan(path: Path) -> ResolvedPlan:
    """Carrega um plano salvo por `save_plan` (erros de I/O são propagados)."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return ResolvedPlan.from_dict(data)
