# src/manifest_resolver/core/governance/suppressions.py
"""
Validação de supressões (`governance.cdkNag.suppress[]`).

Uma supressão é uma exceção auditada e com prazo a uma regra de governança.

Regras (v1):
    - campos obrigatórios: `id`, `justification`, `owner`, `expiresOn`
    - `expiresOn` é uma data ISO
    - `appliesTo` (opcional) lista componentes conhecidos, como nome ou
      `{component: nome}`
    - supressão expirada: aviso em commercial/fedramp-moderate, erro em
      fedramp-high
    - supressão que expira dentro da janela de aviso: aviso

A data de referência (`as_of`) é uma entrada explícita; nada aqui lê o relógio.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Tuple

from manifest_resolver.core.errors import (
    SUPPRESSION_EXPIRED,
    SUPPRESSION_EXPIRING,
    Stage,
    ValidationIssue,
    warning,
)
from manifest_resolver.core.exceptions import ManifestException, SuppressionValidationError
from manifest_resolver.core.manifest.model import ComplianceFramework, Manifest

from .dates import parse_iso_date


REQUIRED_FIELDS = ("id", "justification", "owner", "expiresOn")


@dataclass(frozen=True)
class SuppressionEntry:
    id: str
    justification: str
    owner: str
    expires_on: date
    applies_to: Tuple[str, ...] = ()
    index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "justification": self.justification,
            "owner": self.owner,
            "expiresOn": self.expires_on.isoformat(),
            "appliesTo": list(self.applies_to),
        }


@dataclass
class SuppressionReport:
    entries: List[SuppressionEntry] = field(default_factory=list)
    errors: List[ManifestException] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)


def _applies_to_names(raw: Any, path: str) -> Tuple[Optional[Tuple[str, ...]], Optional[str]]:
    if raw is None:
        return (), None
    if not isinstance(raw, list):
        return None, f"{path}.appliesTo must be a list"
    names: List[str] = []
    for i, item in enumerate(raw):
        if isinstance(item, str) and item:
            names.append(item)
        elif isinstance(item, dict) and isinstance(item.get("component"), str):
            names.append(item["component"])
        else:
            return None, f"{path}.appliesTo[{i}] must be a component name or {{component: name}}"
    return tuple(names), None


def validate_suppressions(
    manifest: Manifest,
    *,
    as_of: date,
    expiry_warning_days: int = 30,
) -> SuppressionReport:
    report = SuppressionReport()
    nag = (manifest.governance or {}).get("cdkNag") or {}
    raw_entries = nag.get("suppress") or []
    known = set(manifest.component_names)
    high = manifest.compliance_framework is ComplianceFramework.FEDRAMP_HIGH

    for i, raw in enumerate(raw_entries):
        path = f"$.governance.cdkNag.suppress[{i}]"
        if not isinstance(raw, dict):
            report.errors.append(SuppressionValidationError("Suppression entry must be a mapping", path=path))
            continue

        missing = [f for f in REQUIRED_FIELDS if raw.get(f) in (None, "")]
        for name in missing:
            report.errors.append(
                SuppressionValidationError(
                    f"Missing required field '{name}' in suppression",
                    path=f"{path}.{name}",
                    details={"field": name, "suppression_id": raw.get("id")},
                    hint="Suppressions must declare id, justification, owner and expiresOn",
                )
            )

        expires_on = parse_iso_date(raw.get("expiresOn"))
        if "expiresOn" not in missing and expires_on is None:
            report.errors.append(
                SuppressionValidationError(
                    f"Invalid expiresOn '{raw.get('expiresOn')}': expected an ISO date (YYYY-MM-DD)",
                    path=f"{path}.expiresOn",
                    details={"value": raw.get("expiresOn")},
                )
            )

        applies_to, problem = _applies_to_names(raw.get("appliesTo"), path)
        if problem:
            report.errors.append(SuppressionValidationError(problem, path=f"{path}.appliesTo"))
        else:
            for name in applies_to or ():
                if name not in known:
                    report.errors.append(
                        SuppressionValidationError(
                            f"Suppression '{raw.get('id')}' applies to unknown component '{name}'",
                            path=f"{path}.appliesTo",
                            details={"component": name, "known": sorted(known)},
                        )
                    )

        if missing or expires_on is None or problem:
            continue

        entry = SuppressionEntry(
            id=str(raw["id"]),
            justification=str(raw["justification"]),
            owner=str(raw["owner"]),
            expires_on=expires_on,
            applies_to=applies_to or (),
            index=i,
        )
        report.entries.append(entry)

        details = {
            "suppression_id": entry.id,
            "expiresOn": entry.expires_on.isoformat(),
            "as_of": as_of.isoformat(),
            "complianceFramework": manifest.compliance_framework.value,
        }
        if entry.expires_on < as_of:
            message = f"Suppression '{entry.id}' expired on {entry.expires_on.isoformat()}"
            if high:
                report.errors.append(
                    SuppressionValidationError(
                        message,
                        path=f"{path}.expiresOn",
                        details=details,
                        hint="Expired suppressions are not allowed under fedramp-high; renew or remove it",
                    )
                )
            else:
                report.warnings.append(
                    warning(
                        stage=Stage.REFERENCES,
                        path=f"{path}.expiresOn",
                        message=message,
                        code=SUPPRESSION_EXPIRED,
                        details=details,
                        hint="Renew or remove the suppression",
                    )
                )
        elif entry.expires_on <= as_of + timedelta(days=expiry_warning_days):
            report.warnings.append(
                warning(
                    stage=Stage.REFERENCES,
                    path=f"{path}.expiresOn",
                    message=(
                        f"Suppression '{entry.id}' expires on {entry.expires_on.isoformat()} "
                        f"(within {expiry_warning_days} days)"
                    ),
                    code=SUPPRESSION_EXPIRING,
                    details=details,
                )
            )

    return report
