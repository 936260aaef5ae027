# src/manifest_resolver/resolver.py
"""
ManifestResolver — ponto de entrada da resolução.

    (texto do manifest, ambiente alvo, registry) → (ResolvedPlan, problemas)

Monta um `ResolutionContext` novo por chamada, executa os estágios
canônicos pelo `Engine` e devolve um `ResolutionResult`. Nenhum estado
sobrevive entre chamadas.

O identificador da resolução é derivado do texto e do ambiente, então a
mesma entrada produz o mesmo log de eventos.

Limites explícitos:
    - Não mapeia problemas para exit codes (responsabilidade da CLI)
    - Não persiste o plano
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from manifest_resolver.core.binding.registry import BinderRegistry
from manifest_resolver.core.config.loader import load_settings
from manifest_resolver.core.engine.engine import Engine, RunResult, exception_to_issues
from manifest_resolver.core.errors import Stage, ValidationIssue
from manifest_resolver.core.exceptions import ManifestException, ManifestResolutionError
from manifest_resolver.core.manifest.loader import load_manifest_file
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.registry.catalog import default_registry
from manifest_resolver.core.registry.kinds import ComponentRegistry
from manifest_resolver.core.traceability.plan import ResolvedPlan
from manifest_resolver.steps import artifacts, default_steps
from manifest_resolver.synthesis.backend import SynthesisBackend


def resolution_id_for(text: str, environment: str) -> str:
    digest = hashlib.sha256(f"{environment}\n{text}".encode("utf-8")).hexdigest()
    return f"res-{digest[:16]}"


@dataclass(frozen=True)
class ResolutionResult:
    """Resultado de uma resolução: plano (quando todos os estágios passam) e problemas."""

    resolution_id: str
    environment: str
    run: RunResult
    plan: Optional[ResolvedPlan] = None
    events: List[Dict[str, Any]] = field(default_factory=list)
    load_errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.load_errors and self.run.ok and self.plan is not None

    @property
    def errors(self) -> List[ValidationIssue]:
        return list(self.load_errors) + self.run.errors

    @property
    def warnings(self) -> List[ValidationIssue]:
        return self.run.warnings

    @property
    def has_internal_errors(self) -> bool:
        return any(e.is_internal for e in self.errors)

    def raise_for_errors(self) -> None:
        errors = self.errors
        if errors:
            raise ManifestResolutionError(errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolutionId": self.resolution_id,
            "environment": self.environment,
            "ok": self.ok,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
            "plan": self.plan.to_dict() if self.plan is not None else None,
        }


class ManifestResolver:
    def __init__(
        self,
        *,
        registry: Optional[ComponentRegistry] = None,
        binders: Optional[BinderRegistry] = None,
        backend: Optional[SynthesisBackend] = None,
        settings: Optional[Dict[str, Any]] = None,
    ):
        self.registry = registry or default_registry()
        self.binders = binders
        self.backend = backend
        self.settings = settings if settings is not None else load_settings()

    def _context(self, text: str, environment: str, as_of: Optional[date]) -> ResolutionContext:
        return ResolutionContext(
            resolution_id=resolution_id_for(text, environment),
            environment=environment,
            settings=self.settings,
            as_of=as_of or date.today(),
            text=text,
        )

    def _run(self, ctx: ResolutionContext) -> ResolutionResult:
        steps = default_steps(self.registry, self.binders, self.backend)
        run = Engine(steps=steps, ctx=ctx).run()
        plan = ctx.get_artifact(artifacts.PLAN) if run.ok and ctx.has_artifact(artifacts.PLAN) else None
        return ResolutionResult(
            resolution_id=ctx.resolution_id,
            environment=ctx.environment,
            run=run,
            plan=plan,
            events=list(ctx.events),
        )

    def resolve_text(self, text: str, environment: str, *, as_of: Optional[date] = None) -> ResolutionResult:
        """
        Resolve um manifest a partir do texto (caminho puro, sem I/O).

        Args:
            text: manifest em YAML ou JSON.
            environment: ambiente alvo (`dev`, `prod`, ...).
            as_of: data de referência para expiração de supressões
                (padrão: hoje).
        """
        return self._run(self._context(text, environment, as_of))

    def resolve_file(
        self,
        path: Union[str, Path],
        environment: str,
        *,
        as_of: Optional[date] = None,
    ) -> ResolutionResult:
        """Lê o manifest do disco (resolvendo `environments.$ref`) e o resolve."""
        p = Path(path)
        text = p.read_text(encoding="utf-8") if p.is_file() else ""
        ctx = self._context(text, environment, as_of)
        try:
            doc = load_manifest_file(p)
        except ManifestException as e:
            return ResolutionResult(
                resolution_id=ctx.resolution_id,
                environment=environment,
                run=RunResult(),
                load_errors=exception_to_issues(e, Stage.PARSE.value),
            )
        ctx.set_artifact(artifacts.DOCUMENT, doc)
        return self._run(ctx)
