# tests/core/governance/test_policy.py
"""
Testes dos overrides de política (camada 5 do ConfigBuilder).
"""

from manifest_resolver.core.governance.dates import parse_iso_date
from manifest_resolver.core.governance.policy import POLICY_OVERRIDES, policy_overrides_for


def test_baseline_applies_to_every_framework():
    for framework in ("commercial", "fedramp-moderate", "fedramp-high"):
        overrides = policy_overrides_for(framework)
        assert overrides["rds-postgres"]["publiclyAccessible"] is False
        assert overrides["s3-bucket"]["blockPublicAccess"] is True


def test_fedramp_high_is_the_strictest():
    high = policy_overrides_for("fedramp-high")
    assert high["lambda-worker"] == {"tracing": "Active"}
    assert high["rds-postgres"]["multiAz"] is True
    assert "lambda-worker" not in policy_overrides_for("commercial")


def test_returned_overrides_are_copies():
    overrides = policy_overrides_for("commercial")
    overrides["rds-postgres"]["publiclyAccessible"] = True
    assert POLICY_OVERRIDES["commercial"]["rds-postgres"]["publiclyAccessible"] is False
    assert policy_overrides_for("unknown") == {}


def test_parse_iso_date():
    assert parse_iso_date("2026-01-16").isoformat() == "2026-01-16"
    assert parse_iso_date("2026-01-16T10:00:00Z").isoformat() == "2026-01-16"
    assert parse_iso_date("16/01/2026") is None
    assert parse_iso_date(None) is None
