"""Step canônico: manifest.parse (v1).

Responsabilidades:
- converter o texto do manifest (YAML/JSON) em documento
- publicar o documento como artifact `manifest.document`

Quando o documento já foi carregado do disco (`load_manifest_file`), o
artifact chega pronto e o estágio apenas o registra.

Limites explícitos (v1):
- NÃO valida estrutura (isso é `manifest.schema`)
- NÃO resolve interpolação
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from manifest_resolver.core.errors import Stage
from manifest_resolver.core.manifest.loader import parse_manifest
from manifest_resolver.core.pipeline.context import ResolutionContext
from manifest_resolver.core.pipeline.step import Step
from manifest_resolver.core.pipeline.types import StepKind, StepResult, StepStatus
from manifest_resolver.steps import artifacts


@dataclass
class ManifestParseStep(Step):
    """Texto do manifest → documento (dict)."""

    id: str = "manifest.parse"
    kind: StepKind = StepKind.TRANSFORM
    stage: str = Stage.PARSE.value
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def run(self, ctx: ResolutionContext) -> StepResult:
        preloaded = ctx.has_artifact(artifacts.DOCUMENT)
        if preloaded:
            doc = ctx.get_artifact(artifacts.DOCUMENT)
        else:
            doc = parse_manifest(ctx.text)
            ctx.set_artifact(artifacts.DOCUMENT, doc)

        components = doc.get("components")
        count = len(components) if isinstance(components, list) else 0

        ctx.log(
            step_id=self.id,
            level="info",
            message="manifest parsed",
            source="file" if preloaded else "text",
            components=count,
        )

        return StepResult(
            step_id=self.id,
            kind=self.kind,
            status=StepStatus.SUCCESS,
            summary="manifest parsed",
            metrics={"top_level_keys": len(doc), "components": count},
            payload={"preloaded": preloaded},
        )
