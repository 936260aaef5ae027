"""
Governança: supressões auditadas, patches aprovados e overrides de política.
"""

from .patches import PatchRecord, validate_patches
from .policy import POLICY_OVERRIDES, policy_overrides_for
from .suppressions import REQUIRED_FIELDS, SuppressionEntry, validate_suppressions
from .validator import GovernanceReport, GovernanceValidator

__all__ = [
    "GovernanceReport",
    "GovernanceValidator",
    "POLICY_OVERRIDES",
    "PatchRecord",
    "REQUIRED_FIELDS",
    "SuppressionEntry",
    "policy_overrides_for",
    "validate_patches",
    "validate_suppressions",
]
