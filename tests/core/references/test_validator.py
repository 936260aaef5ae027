# tests/core/references/test_validator.py
"""
Testes do ReferenceValidator.

Todas as violações semânticas são acumuladas antes de o estágio falhar:
nomes duplicados, alvos inexistentes, seletores ambíguos, auto-bind,
capability não fornecida e `${ref:...}` inválidos.
"""

from manifest_resolver.core.hydration.hydrator import RefOccurrence
from manifest_resolver.core.references.validator import ReferenceValidator


WORKER = {"name": "worker", "type": "lambda-worker", "config": {"handler": "w.h"}}


def _worker(*binds):
    return dict(WORKER, binds=list(binds))


def test_valid_manifest_maps_every_bind(registry, build_manifest):
    manifest = build_manifest(
        [
            {"name": "q", "type": "sqs-queue"},
            {"name": "db", "type": "rds-postgres", "labels": {"shared": "true"}},
            _worker(
                {"to": "q", "capability": "queue:sqs", "access": "read"},
                {"select": {"type": "rds-postgres"}, "capability": "db:postgres", "access": "read"},
            ),
        ]
    )
    report = ReferenceValidator(registry).validate(manifest)
    assert report.ok
    assert report.targets == {("worker", 0): "q", ("worker", 1): "db"}


def test_all_errors_are_accumulated(registry, build_manifest):
    manifest = build_manifest(
        [
            {"name": "q", "type": "sqs-queue"},
            {"name": "q", "type": "sqs-queue"},
            _worker(
                {"to": "ghost", "capability": "queue:sqs", "access": "read"},
                {"to": "worker", "capability": "lambda:function", "access": "write"},
                {"select": {"type": "s3-bucket"}, "capability": "bucket:s3", "access": "read"},
            ),
        ]
    )
    report = ReferenceValidator(registry).validate(manifest)
    codes = sorted(e.code for e in report.errors)
    assert codes == ["DUPLICATE_COMPONENT", "REFERENCE_ERROR", "REFERENCE_ERROR", "SELECTOR_NO_MATCH"]
    paths = {e.path for e in report.errors}
    assert "$.components[1].name" in paths
    assert "$.components[2].binds[0].to" in paths
    assert "$.components[2].binds[1]" in paths
    assert "$.components[2].binds[2].select" in paths
    assert report.targets == {}


def test_capability_not_provided(registry, build_manifest):
    manifest = build_manifest(
        [{"name": "q", "type": "sqs-queue"}, _worker({"to": "q", "capability": "db:postgres", "access": "read"})]
    )
    report = ReferenceValidator(registry).validate(manifest)
    assert [e.code for e in report.errors] == ["CAPABILITY_NOT_PROVIDED"]
    assert report.errors[0].path == "$.components[1].binds[0].capability"
    assert report.errors[0].details["provided"] == ["queue:sqs"]


def test_refs_are_checked_and_parsed(registry, build_manifest):
    manifest = build_manifest([{"name": "db", "type": "rds-postgres"}, WORKER])
    refs = [
        RefOccurrence(1, "$.components[1].config.environmentVariables.A", "db.db:postgres.host"),
        RefOccurrence(1, "$.components[1].config.environmentVariables.B", "ghost.db:postgres"),
        RefOccurrence(1, "$.components[1].config.environmentVariables.C", "db.queue:sqs"),
        RefOccurrence(1, "$.components[1].config.environmentVariables.D", "worker"),
        RefOccurrence(1, "$.components[1].config.environmentVariables.E", "db..host"),
    ]
    report = ReferenceValidator(registry).validate(manifest, refs)

    by_path = {e.path.rsplit(".", 1)[-1]: e.code for e in report.errors}
    assert by_path == {
        "B": "REFERENCE_ERROR",
        "C": "CAPABILITY_NOT_PROVIDED",
        "D": "REFERENCE_ERROR",
        "E": "REFERENCE_ERROR",
    }
    [(occurrence, ref)] = report.refs["worker"]
    assert occurrence.path.endswith(".A")
    assert (ref.component, ref.capability, ref.field) == ("db", "db:postgres", "host")
