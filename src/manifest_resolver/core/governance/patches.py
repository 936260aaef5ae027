# src/manifest_resolver/core/governance/patches.py
"""
Registros de patch e aprovação de escape hatches.

Modificações via escape hatch:
    - entradas de `patches[]` (name, justification, approvedBy, approvedDate,
      appliesTo)
    - `overrides` declarados em um componente

Aprovação registrada = `approvedBy` não vazio + `approvedDate` ISO.

Regras por framework:
    - fedramp-high: toda modificação precisa de aprovação; `overrides` de um
      componente precisam de um patch aprovado cujo `appliesTo` liste o
      componente. Falta de aprovação é erro, nunca aviso.
    - fedramp-moderate: mesma checagem, mas falta de aprovação é aviso.
    - commercial: apenas completude dos registros.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Set, Tuple

from manifest_resolver.core.errors import PATCH_APPROVAL_MISSING, Stage, ValidationIssue, warning
from manifest_resolver.core.exceptions import (
    GovernanceApprovalRequiredError,
    ManifestException,
    PatchValidationError,
)
from manifest_resolver.core.manifest.model import ComplianceFramework, Manifest

from .dates import parse_iso_date


@dataclass(frozen=True)
class PatchRecord:
    name: str
    justification: str
    approved_by: Optional[str] = None
    approved_date: Optional[date] = None
    applies_to: Tuple[str, ...] = ()
    index: int = 0

    @property
    def approved(self) -> bool:
        return bool(self.approved_by) and self.approved_date is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "justification": self.justification,
            "approvedBy": self.approved_by,
            "approvedDate": self.approved_date.isoformat() if self.approved_date else None,
            "appliesTo": list(self.applies_to),
            "approved": self.approved,
        }


@dataclass
class PatchReport:
    records: List[PatchRecord] = field(default_factory=list)
    errors: List[ManifestException] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)


def _parse_record(raw: Any, index: int, known: Set[str], report: PatchReport) -> Optional[PatchRecord]:
    path = f"$.patches[{index}]"
    if not isinstance(raw, dict):
        report.errors.append(PatchValidationError("Patch entry must be a mapping", path=path))
        return None

    ok = True
    for name in ("name", "justification"):
        if not raw.get(name):
            report.errors.append(
                PatchValidationError(
                    f"Missing required field '{name}' in patch",
                    path=f"{path}.{name}",
                    details={"field": name, "patch": raw.get("name")},
                    hint="Every patch needs a name and a justification",
                )
            )
            ok = False

    approved_date = None
    if raw.get("approvedDate") not in (None, ""):
        approved_date = parse_iso_date(raw["approvedDate"])
        if approved_date is None:
            report.errors.append(
                PatchValidationError(
                    f"Invalid approvedDate '{raw['approvedDate']}': expected an ISO date (YYYY-MM-DD)",
                    path=f"{path}.approvedDate",
                    details={"value": raw["approvedDate"]},
                )
            )
            ok = False

    applies_to = raw.get("appliesTo") or []
    if not isinstance(applies_to, list) or not all(isinstance(n, str) for n in applies_to):
        report.errors.append(
            PatchValidationError("appliesTo must be a list of component names", path=f"{path}.appliesTo")
        )
        return None
    for name in applies_to:
        if name not in known:
            report.errors.append(
                PatchValidationError(
                    f"Patch '{raw.get('name')}' applies to unknown component '{name}'",
                    path=f"{path}.appliesTo",
                    details={"component": name, "known": sorted(known)},
                )
            )
            ok = False

    if not ok:
        return None
    return PatchRecord(
        name=str(raw["name"]),
        justification=str(raw["justification"]),
        approved_by=str(raw["approvedBy"]) if raw.get("approvedBy") else None,
        approved_date=approved_date,
        applies_to=tuple(applies_to),
        index=index,
    )


def validate_patches(manifest: Manifest) -> PatchReport:
    report = PatchReport()
    known = set(manifest.component_names)
    for i, raw in enumerate(manifest.patches):
        record = _parse_record(raw, i, known, report)
        if record is not None:
            report.records.append(record)

    framework = manifest.compliance_framework
    if not framework.is_fedramp:
        return report
    high = framework is ComplianceFramework.FEDRAMP_HIGH

    def missing_approval(message: str, path: str, details: Dict[str, Any]) -> None:
        hint = "Record approvedBy and approvedDate on a patch that covers this change"
        if high:
            report.errors.append(
                GovernanceApprovalRequiredError(message, path=path, details=details, hint=hint)
            )
        else:
            report.warnings.append(
                warning(
                    stage=Stage.GOVERNANCE,
                    path=path,
                    message=message,
                    code=PATCH_APPROVAL_MISSING,
                    details=details,
                    hint=hint,
                )
            )

    for record in report.records:
        if not record.approved:
            missing_approval(
                f"Patch '{record.name}' has no recorded approval",
                f"$.patches[{record.index}]",
                {"patch": record.name, "complianceFramework": framework.value},
            )

    approved_for: Set[str] = set()
    for record in report.records:
        if record.approved:
            approved_for.update(record.applies_to)

    for component in manifest.components:
        if component.overrides and component.name not in approved_for:
            missing_approval(
                f"Component '{component.name}' declares overrides without an approved patch",
                f"{component.path}.overrides",
                {
                    "component": component.name,
                    "overridden_keys": sorted(component.overrides),
                    "complianceFramework": framework.value,
                },
            )

    return report
