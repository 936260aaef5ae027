"""
Referências somente-leitura `${ref:component[.capability[.field]]}`.

A capability nunca contém ponto (`db:postgres`), então a expressão é dividida
em no máximo três partes; `field` pode ser um caminho pontuado.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from manifest_resolver.core.exceptions import ComponentReferenceError


@dataclass(frozen=True)
class ComponentRef:
    component: str
    capability: Optional[str] = None
    field: Optional[str] = None

    @classmethod
    def parse(cls, expression: str, *, path: str = "$") -> "ComponentRef":
        parts = expression.split(".", 2)
        if any(not p for p in parts):
            raise ComponentReferenceError(
                f"Malformed reference '${{ref:{expression}}}'",
                path=path,
                details={"expression": expression},
                hint="Use ${ref:component}, ${ref:component.capability} or ${ref:component.capability.field}",
            )
        return cls(
            component=parts[0],
            capability=parts[1] if len(parts) > 1 else None,
            field=parts[2] if len(parts) > 2 else None,
        )

    def select(self, capabilities: Dict[str, Dict[str, Any]]) -> Any:
        """Extrai o valor referenciado dos dados de capability do produtor."""
        if self.capability is None:
            return {k: dict(v) for k, v in sorted(capabilities.items())}
        value: Any = capabilities[self.capability]
        if self.field is None:
            return dict(value)
        for part in self.field.split("."):
            if not isinstance(value, dict) or part not in value:
                raise KeyError(part)
            value = value[part]
        return value
