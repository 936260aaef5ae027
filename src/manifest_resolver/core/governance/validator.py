# src/manifest_resolver/core/governance/validator.py
"""
GovernanceValidator — fachada sobre supressões e patches.

O plano só é `deployable` quando o relatório de governança não tem erros.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List

from manifest_resolver.core.errors import ValidationIssue
from manifest_resolver.core.exceptions import ManifestException
from manifest_resolver.core.manifest.model import Manifest

from .patches import PatchRecord, validate_patches
from .suppressions import SuppressionEntry, validate_suppressions


@dataclass
class GovernanceReport:
    suppressions: List[SuppressionEntry] = field(default_factory=list)
    patches: List[PatchRecord] = field(default_factory=list)
    errors: List[ManifestException] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def deployable(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suppressions": [s.to_dict() for s in self.suppressions],
            "patches": [p.to_dict() for p in self.patches],
            "deployable": self.deployable,
        }


class GovernanceValidator:
    def __init__(self, *, as_of: date, expiry_warning_days: int = 30):
        self.as_of = as_of
        self.expiry_warning_days = expiry_warning_days

    def check_suppressions(self, manifest: Manifest) -> GovernanceReport:
        found = validate_suppressions(
            manifest, as_of=self.as_of, expiry_warning_days=self.expiry_warning_days
        )
        return GovernanceReport(
            suppressions=list(found.entries),
            errors=list(found.errors),
            warnings=list(found.warnings),
        )

    def check_patches(self, manifest: Manifest) -> GovernanceReport:
        found = validate_patches(manifest)
        return GovernanceReport(
            patches=list(found.records),
            errors=list(found.errors),
            warnings=list(found.warnings),
        )

    def validate(self, manifest: Manifest) -> GovernanceReport:
        suppressions = self.check_suppressions(manifest)
        patches = self.check_patches(manifest)
        return GovernanceReport(
            suppressions=suppressions.suppressions,
            patches=patches.patches,
            errors=suppressions.errors + patches.errors,
            warnings=suppressions.warnings + patches.warnings,
        )
