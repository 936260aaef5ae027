"""
Modelo interno do manifest já validado e hidratado.

As classes deste módulo são construídas a partir do documento depois dos
estágios de schema e hidratação; por isso `from_dict` assume estrutura válida
e não repete validações.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ComplianceFramework(str, Enum):
    COMMERCIAL = "commercial"
    FEDRAMP_MODERATE = "fedramp-moderate"
    FEDRAMP_HIGH = "fedramp-high"

    @property
    def is_fedramp(self) -> bool:
        return self is not ComplianceFramework.COMMERCIAL


class AccessLevel(str, Enum):
    READ = "read"
    WRITE = "write"
    READWRITE = "readwrite"
    ADMIN = "admin"


COMPLIANCE_FRAMEWORKS: Tuple[str, ...] = tuple(f.value for f in ComplianceFramework)
ACCESS_LEVELS: Tuple[str, ...] = tuple(a.value for a in AccessLevel)


def label_value(value: Any) -> str:
    """Labels são texto; booleanos seguem a grafia YAML (`true`/`false`)."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def label_map(data: Any) -> Dict[str, str]:
    return {str(k): label_value(v) for k, v in (data or {}).items()}


@dataclass(frozen=True)
class Selector:
    type: str
    with_labels: Dict[str, str] = field(default_factory=dict)

    def matches(self, component: "ComponentSpec") -> bool:
        if component.type != self.type:
            return False
        return all(component.labels.get(k) == v for k, v in self.with_labels.items())

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "withLabels": dict(self.with_labels)}


@dataclass(frozen=True)
class BindDirective:
    """Intenção declarada de consumir a capability de outro componente."""

    capability: str
    access: str
    to: Optional[str] = None
    select: Optional[Selector] = None
    env: Dict[str, str] = field(default_factory=dict)
    options: Dict[str, Any] = field(default_factory=dict)
    index: int = 0

    def describe_target(self) -> str:
        if self.to is not None:
            return self.to
        if self.select is None:
            return "<no target>"
        labels = ",".join(f"{k}={v}" for k, v in sorted(self.select.with_labels.items()))
        return f"select({self.select.type}{'; ' + labels if labels else ''})"

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"capability": self.capability, "access": self.access}
        if self.to is not None:
            out["to"] = self.to
        if self.select is not None:
            out["select"] = self.select.to_dict()
        if self.env:
            out["env"] = dict(self.env)
        if self.options:
            out["options"] = dict(self.options)
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "BindDirective":
        select = data.get("select")
        return cls(
            capability=data["capability"],
            access=data["access"],
            to=data.get("to"),
            select=(
                Selector(type=select["type"], with_labels=label_map(select.get("withLabels")))
                if isinstance(select, dict)
                else None
            ),
            env=dict(data.get("env") or {}),
            options=dict(data.get("options") or {}),
            index=index,
        )


@dataclass(frozen=True)
class ComponentSpec:
    name: str
    type: str
    config: Dict[str, Any] = field(default_factory=dict)
    binds: Tuple[BindDirective, ...] = ()
    labels: Dict[str, str] = field(default_factory=dict)
    overrides: Dict[str, Any] = field(default_factory=dict)
    policy: Dict[str, Any] = field(default_factory=dict)
    index: int = 0

    @property
    def path(self) -> str:
        return f"$.components[{self.index}]"

    def bind_path(self, bind: BindDirective) -> str:
        return f"{self.path}.binds[{bind.index}]"

    @classmethod
    def from_dict(cls, data: Dict[str, Any], index: int = 0) -> "ComponentSpec":
        return cls(
            name=data["name"],
            type=data["type"],
            config=dict(data.get("config") or {}),
            binds=tuple(
                BindDirective.from_dict(b, i) for i, b in enumerate(data.get("binds") or [])
            ),
            labels=label_map(data.get("labels")),
            overrides=dict(data.get("overrides") or {}),
            policy=dict(data.get("policy") or {}),
            index=index,
        )


@dataclass(frozen=True)
class Manifest:
    service: str
    owner: str
    compliance_framework: ComplianceFramework
    components: Tuple[ComponentSpec, ...]
    environments: Dict[str, Any] = field(default_factory=dict)
    governance: Dict[str, Any] = field(default_factory=dict)
    patches: Tuple[Dict[str, Any], ...] = ()
    labels: Dict[str, str] = field(default_factory=dict)

    @property
    def component_names(self) -> List[str]:
        return [c.name for c in self.components]

    def component(self, name: str) -> Optional[ComponentSpec]:
        for c in self.components:
            if c.name == name:
                return c
        return None

    def environment_defaults(self, environment: str) -> Dict[str, Any]:
        env = self.environments.get(environment) or {}
        defaults = env.get("defaults") if isinstance(env, dict) else None
        return dict(defaults or {})

    @classmethod
    def from_dict(cls, doc: Dict[str, Any]) -> "Manifest":
        return cls(
            service=doc["service"],
            owner=doc["owner"],
            compliance_framework=ComplianceFramework(doc["complianceFramework"]),
            components=tuple(
                ComponentSpec.from_dict(c, i) for i, c in enumerate(doc.get("components") or [])
            ),
            environments=dict(doc.get("environments") or {}),
            governance=dict(doc.get("governance") or {}),
            patches=tuple(doc.get("patches") or ()),
            labels=label_map(doc.get("labels")),
        )
