# tests/errors/test_issue_payloads.py
"""
Guardrails do payload canônico de problemas (`ValidationIssue`).

Todo problema que sai da resolução deve carregar o mínimo canônico
`{stage, path, message, severity, code, category, details, hint}` e ser
serializável; exceções tipadas mantêm código e categoria estáveis.
"""

import json

import pytest

from manifest_resolver.core.engine.engine import exception_to_issues
from manifest_resolver.core.errors import ErrorCategory, ValidationIssue, engine_execution_error
from manifest_resolver.core.exceptions import (
    AmbiguousSelectorError,
    CapabilityConflictError,
    ComponentReferenceError,
    ManifestResolutionError,
    RegistryDefinitionError,
    SchemaValidationError,
    SchemaViolation,
    StageFailure,
)


CANONICAL_KEYS = {"stage", "path", "message", "severity", "code", "category", "details", "hint"}


def test_issue_payload_has_canonical_minimum():
    issue = ComponentReferenceError(
        "Bind target 'ghost' does not exist",
        path="$.components[1].binds[0].to",
        details={"target": "ghost"},
        hint="Declare the component or fix the name",
    ).to_issue("references")

    payload = issue.to_dict()
    assert set(payload) == CANONICAL_KEYS
    assert payload["code"] == "REFERENCE_ERROR"
    assert payload["category"] == "user"
    assert payload["severity"] == "error"
    assert json.loads(json.dumps(payload)) == payload


@pytest.mark.parametrize(
    "kind, code",
    [
        (AmbiguousSelectorError.NO_MATCH, "SELECTOR_NO_MATCH"),
        (AmbiguousSelectorError.MULTIPLE_MATCHES, "SELECTOR_MULTIPLE_MATCHES"),
    ],
)
def test_selector_codes(kind, code):
    assert AmbiguousSelectorError("no unique match", kind=kind).code == code


@pytest.mark.parametrize("exc_cls", [RegistryDefinitionError, CapabilityConflictError])
def test_platform_errors_are_internal(exc_cls):
    issue = exc_cls("broken registry entry").to_issue("engine")
    assert issue.is_internal
    assert issue.category == ErrorCategory.INTERNAL.value


def test_schema_failure_unfolds_into_violations():
    failure = SchemaValidationError.collect(
        "schema",
        [
            SchemaViolation("'complianceFramework' is a required property", path="$.complianceFramework", rule="required"),
            SchemaViolation("[] should be non-empty", path="$.components", rule="minItems"),
        ],
    )
    issues = exception_to_issues(failure, "schema")
    assert [i.path for i in issues] == ["$.complianceFramework", "$.components"]
    assert {i.code for i in issues} == {"SCHEMA_VIOLATION"}


def test_empty_stage_failure_still_reports():
    [issue] = exception_to_issues(StageFailure.collect("binding", []), "binding")
    assert issue.code == "STAGE_FAILED"


def test_engine_execution_error_has_no_traceback():
    issue = engine_execution_error(stage="config", exc_type="ZeroDivisionError")
    assert issue.message == "Unexpected failure while resolving the manifest"
    assert issue.is_error
    assert "Traceback" not in json.dumps(issue.to_dict())


def test_resolution_error_summarizes_issues():
    issues = [
        ValidationIssue(stage="parse", path="$", message="first"),
        ValidationIssue(stage="parse", path="$", message="second"),
    ]
    exc = ManifestResolutionError(issues)
    assert str(exc) == "first (+1 more)"
    assert exc.issues == issues
