"""
Resolução do alvo de um bind.

- `to:` é busca exata por nome
- `select:` filtra todos os componentes por `type` e igualdade de labels e
  precisa produzir exatamente um resultado: zero é `NoMatch`, mais de um é
  `MultipleMatches`. O resolver nunca escolhe por conta própria.
"""

from __future__ import annotations

from typing import Sequence

from manifest_resolver.core.exceptions import AmbiguousSelectorError, ComponentReferenceError
from manifest_resolver.core.manifest.model import BindDirective, ComponentSpec


def resolve_target(
    bind: BindDirective,
    components: Sequence[ComponentSpec],
    *,
    path: str = "$",
) -> ComponentSpec:
    if bind.to is not None:
        for component in components:
            if component.name == bind.to:
                return component
        raise ComponentReferenceError(
            f"Bind target '{bind.to}' does not exist",
            path=f"{path}.to",
            details={"target": bind.to, "known": sorted(c.name for c in components)},
        )

    selector = bind.select
    if selector is None:
        raise ComponentReferenceError("Bind declares neither 'to' nor 'select'", path=path)

    matches = [c for c in components if selector.matches(c)]
    if len(matches) == 1:
        return matches[0]

    details = {
        "selector": selector.to_dict(),
        "candidates": [c.name for c in matches],
    }
    if not matches:
        raise AmbiguousSelectorError(
            f"Selector {bind.describe_target()} matched no component",
            path=f"{path}.select",
            details=details,
            hint="Check the selector type and labels against the declared components",
            kind=AmbiguousSelectorError.NO_MATCH,
        )
    raise AmbiguousSelectorError(
        f"Selector {bind.describe_target()} matched {len(matches)} components: "
        f"{', '.join(c.name for c in matches)}",
        path=f"{path}.select",
        details=details,
        hint="Add labels to the selector (or use 'to:') so exactly one component matches",
        kind=AmbiguousSelectorError.MULTIPLE_MATCHES,
        candidates=tuple(c.name for c in matches),
    )
