# tests/core/governance/test_suppressions.py
"""
Testes da validação de supressões (`governance.cdkNag.suppress[]`).

Os testes asseguram que:
- os quatro campos obrigatórios são exigidos
- `expiresOn` é uma data ISO
- supressão expirada é erro apenas em fedramp-high; nos demais é aviso
- supressão dentro da janela de aviso gera aviso
- a data de referência é sempre explícita (`as_of`)
"""

from datetime import date

import pytest

from manifest_resolver.core.errors import SUPPRESSION_EXPIRED, SUPPRESSION_EXPIRING
from manifest_resolver.core.governance.suppressions import validate_suppressions
from manifest_resolver.core.governance.validator import GovernanceValidator


QUEUE = [{"name": "requests-queue", "type": "sqs-queue"}]


def _suppression(**overrides):
    entry = {
        "id": "AwsSolutions-SQS3",
        "justification": "DLQ handled by the consumer",
        "owner": "team-orders",
        "expiresOn": "2020-01-01",
        "appliesTo": ["requests-queue"],
    }
    entry.update(overrides)
    return {k: v for k, v in entry.items() if v is not None}


def _manifest(build_manifest, framework, *entries):
    return build_manifest(QUEUE, framework, governance={"cdkNag": {"suppress": list(entries)}})


def test_expired_suppression_fails_under_fedramp_high(build_manifest, as_of):
    """
    Supressão expirada em `fedramp-high`: falha dura.

    O erro aponta para `expiresOn` e carrega a data de referência usada.
    """
    manifest = _manifest(build_manifest, "fedramp-high", _suppression())
    report = GovernanceValidator(as_of=as_of).check_suppressions(manifest)

    assert not report.deployable
    assert [e.code for e in report.errors] == ["SUPPRESSION_INVALID"]
    err = report.errors[0]
    assert err.path == "$.governance.cdkNag.suppress[0].expiresOn"
    assert err.details["as_of"] == as_of.isoformat()
    assert report.warnings == []


@pytest.mark.parametrize("framework", ["commercial", "fedramp-moderate"])
def test_expired_suppression_warns_elsewhere(build_manifest, as_of, framework):
    manifest = _manifest(build_manifest, framework, _suppression())
    report = GovernanceValidator(as_of=as_of).check_suppressions(manifest)

    assert report.deployable
    assert [w.code for w in report.warnings] == [SUPPRESSION_EXPIRED]
    w = report.warnings[0]
    assert w.severity == "warning"
    assert w.stage == "references"
    assert w.path == "$.governance.cdkNag.suppress[0].expiresOn"
    assert [s.id for s in report.suppressions] == ["AwsSolutions-SQS3"]


def test_expiring_soon_warns(build_manifest):
    manifest = _manifest(build_manifest, "fedramp-high", _suppression(expiresOn="2026-02-01"))
    report = validate_suppressions(manifest, as_of=date(2026, 1, 16), expiry_warning_days=30)
    assert report.errors == []
    assert [w.code for w in report.warnings] == [SUPPRESSION_EXPIRING]


def test_far_future_is_silent(build_manifest, as_of):
    manifest = _manifest(build_manifest, "fedramp-high", _suppression(expiresOn="2030-01-01"))
    report = validate_suppressions(manifest, as_of=as_of)
    assert report.errors == [] and report.warnings == []
    assert report.entries[0].to_dict()["expiresOn"] == "2030-01-01"


def test_same_day_is_not_expired(build_manifest, as_of):
    manifest = _manifest(build_manifest, "fedramp-high", _suppression(expiresOn=as_of.isoformat()))
    report = validate_suppressions(manifest, as_of=as_of)
    assert report.errors == []
    assert [w.code for w in report.warnings] == [SUPPRESSION_EXPIRING]


def test_missing_fields_are_each_reported(build_manifest, as_of):
    manifest = _manifest(build_manifest, "commercial", _suppression(owner=None, justification=""))
    report = validate_suppressions(manifest, as_of=as_of)
    assert sorted(e.path for e in report.errors) == [
        "$.governance.cdkNag.suppress[0].justification",
        "$.governance.cdkNag.suppress[0].owner",
    ]
    assert report.entries == []


@pytest.mark.parametrize(
    "overrides, path_suffix",
    [
        ({"expiresOn": "next tuesday"}, "expiresOn"),
        ({"appliesTo": ["ghost"]}, "appliesTo"),
        ({"appliesTo": "requests-queue"}, "appliesTo"),
    ],
)
def test_invalid_entries(build_manifest, as_of, overrides, path_suffix):
    manifest = _manifest(build_manifest, "commercial", _suppression(**overrides))
    report = validate_suppressions(manifest, as_of=as_of)
    assert [e.path for e in report.errors] == [f"$.governance.cdkNag.suppress[0].{path_suffix}"]


def test_applies_to_accepts_component_objects(build_manifest, as_of):
    manifest = _manifest(
        build_manifest, "commercial", _suppression(expiresOn="2030-01-01", appliesTo=[{"component": "requests-queue"}])
    )
    report = validate_suppressions(manifest, as_of=as_of)
    assert report.entries[0].applies_to == ("requests-queue",)
