"""
Overrides de política: valores forçados pela governança (camada 5).

Diferente dos defaults de compliance (camada 2), estes valores vencem o
`config` do componente. Quando isso substitui um valor escrito pelo autor,
o ConfigBuilder registra um aviso.
"""

from __future__ import annotations

from typing import Any, Dict

from manifest_resolver.core.config.merge import deep_merge


_BASELINE: Dict[str, Dict[str, Any]] = {
    "rds-postgres": {"publiclyAccessible": False, "storageEncrypted": True},
    "s3-bucket": {"blockPublicAccess": True},
    "elasticache-redis": {"transitEncryption": True, "atRestEncryption": True},
}

POLICY_OVERRIDES: Dict[str, Dict[str, Dict[str, Any]]] = {
    "commercial": _BASELINE,
    "fedramp-moderate": deep_merge(
        _BASELINE,
        {
            "sqs-queue": {"encryption": "kms"},
            "s3-bucket": {"encryption": "kms"},
            "sns-topic": {"encryption": "kms"},
            "rds-postgres": {"deletionProtection": True},
        },
    ),
    "fedramp-high": deep_merge(
        _BASELINE,
        {
            "sqs-queue": {"encryption": "kms"},
            "s3-bucket": {"encryption": "kms", "versioning": True},
            "sns-topic": {"encryption": "kms"},
            "rds-postgres": {"deletionProtection": True, "multiAz": True},
            "elasticache-redis": {"authToken": True},
            "dynamodb-table": {"pointInTimeRecovery": True, "encryption": "customer-managed"},
            "lambda-api": {"tracing": "Active"},
            "lambda-worker": {"tracing": "Active"},
        },
    ),
}


def policy_overrides_for(framework: str) -> Dict[str, Dict[str, Any]]:
    """Cópia dos overrides do framework, indexada por tipo de componente."""
    return deep_merge({}, POLICY_OVERRIDES.get(framework) or {})
