# src/manifest_resolver/core/engine/engine.py
"""
Engine da resolução: planner + executor fail-fast.

Regras:
    - dentro de um estágio, as violações são acumuladas pelo próprio Step
      (levantadas juntas em `StageFailure`)
    - entre estágios, a execução para no primeiro estágio que falha
      (`engine.fail_fast`, padrão True); sem fail-fast, estágios cujas
      dependências falharam são pulados
    - toda exceção vira `ValidationIssue`: `ManifestException` com seu código
      e categoria, qualquer outra como `ENGINE_EXECUTION_ERROR` (internal),
      sem stack trace no payload
    - `StepResult` é imutável; enriquecimento usa `dataclasses.replace`
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence

from manifest_resolver.core.errors import (
    ENGINE_CONFIGURATION_ERROR,
    ErrorCategory,
    Severity,
    Stage,
    ValidationIssue,
    engine_execution_error,
)
from manifest_resolver.core.exceptions import ManifestException, StageFailure
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus

from .planner import plan_execution


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado da execução dos estágios, na ordem planejada."""

    steps: Dict[str, StepResult] = field(default_factory=dict)
    configuration_errors: List[ValidationIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.configuration_errors and all(
            r.status == StepStatus.SUCCESS for r in self.steps.values()
        )

    @property
    def failed_step(self) -> Optional[str]:
        for sid, r in self.steps.items():
            if r.status == StepStatus.FAILED:
                return sid
        return None

    @property
    def errors(self) -> List[ValidationIssue]:
        out = list(self.configuration_errors)
        for r in self.steps.values():
            out.extend(r.errors)
        return out

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [w for r in self.steps.values() for w in r.warnings]


def exception_to_issues(exc: Exception, stage: str) -> List[ValidationIssue]:
    """Converte uma exceção de estágio em problemas serializáveis."""
    if isinstance(exc, StageFailure):
        if exc.errors:
            return [e.to_issue(stage) for e in exc.errors]
        return [exc.to_issue(stage)]
    if isinstance(exc, ManifestException):
        return [exc.to_issue(stage)]
    return [
        engine_execution_error(
            stage=stage,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )
    ]


class Engine:
    def __init__(self, *, steps: Sequence[Step], ctx: ResolutionContext):
        self.steps: List[Step] = list(steps)
        self.ctx = ctx

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.settings or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", True))

    def _stage_of(self, step: Step) -> str:
        return str(getattr(step, "stage", None) or Stage.ENGINE.value)

    def _with_ctx_warnings(self, step_id: str, result: StepResult) -> StepResult:
        ctx_w = list(self.ctx.warnings.get(step_id, []))
        merged: List[ValidationIssue] = []
        for w in list(result.warnings) + ctx_w:
            if w not in merged:
                merged.append(w)
        return replace(result, step_id=step_id, warnings=merged)

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        errors: Optional[List[ValidationIssue]] = None,
    ) -> StepResult:
        r = StepResult(
            step_id=step.id,
            kind=getattr(step, "kind", StepKind.VALIDATE) or StepKind.VALIDATE,
            status=status,
            summary=summary,
            errors=list(errors or []),
        )
        return self._with_ctx_warnings(step.id, r)

    def run(self) -> RunResult:
        try:
            ordered = plan_execution(self.steps)
        except ValueError as e:
            return RunResult(
                configuration_errors=[
                    ValidationIssue(
                        stage=Stage.ENGINE.value,
                        path="$",
                        message=str(e),
                        severity=Severity.ERROR.value,
                        code=ENGINE_CONFIGURATION_ERROR,
                        category=ErrorCategory.INTERNAL.value,
                        details={"exc_type": e.__class__.__name__},
                    )
                ]
            )

        fail_fast = self._fail_fast()
        results: Dict[str, StepResult] = {}
        stopped = False
        for step in ordered:
            sid = step.id

            deps = list(getattr(step, "depends_on", []) or [])
            if stopped or any(results.get(d) and results[d].status != StepStatus.SUCCESS for d in deps):
                results[sid] = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped after an earlier stage failed",
                )
                continue

            self.ctx.log(step_id=sid, level="info", message="stage started")
            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    raise TypeError("Step.run(ctx) must return StepResult")
                results[sid] = self._with_ctx_warnings(sid, step_result)
                self.ctx.log(step_id=sid, level="info", message="stage finished", summary=step_result.summary)

            except TypeError as e:
                if "must return StepResult" not in str(e):
                    issues = exception_to_issues(e, self._stage_of(step))
                else:
                    issues = [
                        ValidationIssue(
                            stage=self._stage_of(step),
                            path="$",
                            message="Step returned an invalid result type",
                            code=ENGINE_CONFIGURATION_ERROR,
                            category=ErrorCategory.INTERNAL.value,
                            details={"step_id": sid, "expected": "StepResult"},
                            hint="Make the step return a StepResult",
                        )
                    ]
                results[sid] = self._failed(step, issues)
                stopped = fail_fast
            except Exception as e:
                issues = exception_to_issues(e, self._stage_of(step))
                results[sid] = self._failed(step, issues)
                stopped = fail_fast

        return RunResult(steps=results)

    def _failed(self, step: Step, issues: List[ValidationIssue]) -> StepResult:
        self.ctx.log(
            step_id=step.id,
            level="error",
            message="stage failed",
            codes=sorted({i.code for i in issues}),
            count=len(issues),
        )
        return self._mk_result(
            step=step,
            status=StepStatus.FAILED,
            summary=issues[0].message if issues else "stage failed",
            errors=issues,
        )
