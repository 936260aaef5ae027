# src/manifest_resolver/core/registry/catalog.py
"""
Catálogo padrão de tipos de componente.

Os dados aqui são puramente declarativos: schema de config, capabilities,
fallbacks seguros, defaults por framework e templates de capability. Nenhum
comportamento específico de nuvem vive neste módulo.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .kinds import ComponentKind, ComponentRegistry


_STRING_MAP = {"type": "object", "additionalProperties": {"type": "string"}}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}
_LOG_RETENTION = {"type": "integer", "minimum": 1, "maximum": 3653}
_PORT = {"type": "integer", "minimum": 1, "maximum": 65535}

_NAME = "{service}-{component}"
_LAMBDA_ARN = "arn:aws:lambda:{region}:{account}:function:" + _NAME


def _object(properties: Dict[str, Any], required: List[str] | None = None) -> Dict[str, Any]:
    schema: Dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        schema["required"] = required
    return schema


_LAMBDA_PROPERTIES: Dict[str, Any] = {
    "handler": {"type": "string", "minLength": 1},
    "runtime": {"enum": ["python3.11", "python3.12", "nodejs18.x", "nodejs20.x", "java21"]},
    "codePath": {"type": "string"},
    "memorySize": {"type": "integer", "minimum": 128, "maximum": 10240},
    "timeout": {"type": "integer", "minimum": 1, "maximum": 900},
    "logRetentionDays": _LOG_RETENTION,
    "tracing": {"enum": ["Active", "PassThrough"]},
    "reservedConcurrency": {"type": "integer", "minimum": 0},
    "environmentVariables": _STRING_MAP,
    "vpc": _object(
        {
            "enabled": {"type": "boolean"},
            "subnetType": {"enum": ["private", "isolated"]},
        }
    ),
}

_LAMBDA_COMPLIANCE = {
    "commercial": {},
    "fedramp-moderate": {
        "tracing": "Active",
        "logRetentionDays": 90,
        "vpc": {"enabled": True, "subnetType": "private"},
    },
    "fedramp-high": {
        "tracing": "Active",
        "logRetentionDays": 365,
        "reservedConcurrency": 10,
        "vpc": {"enabled": True, "subnetType": "isolated"},
    },
}

_LAMBDA_FUNCTION_TEMPLATE = {
    "functionName": _NAME,
    "functionArn": _LAMBDA_ARN,
}


LAMBDA_API = ComponentKind(
    type="lambda-api",
    compute=True,
    config_schema=_object(
        dict(
            _LAMBDA_PROPERTIES,
            api=_object(
                {
                    "stage": {"type": "string", "pattern": "^[A-Za-z0-9_-]+$"},
                    "cors": _object(
                        {"allowOrigins": _STRING_LIST, "allowMethods": _STRING_LIST}
                    ),
                }
            ),
            domainName={"type": "string"},
        ),
        required=["handler"],
    ),
    provides=("api:rest", "lambda:function"),
    fallbacks={
        "runtime": "python3.12",
        "memorySize": 256,
        "timeout": 30,
        "logRetentionDays": 14,
        "tracing": "PassThrough",
        "environmentVariables": {},
        "vpc": {"enabled": False},
        "api": {"stage": "v1", "cors": {"allowOrigins": [], "allowMethods": ["GET"]}},
    },
    compliance_defaults=_LAMBDA_COMPLIANCE,
    capability_templates={
        "api:rest": {
            "url": "https://" + _NAME + ".execute-api.{region}.amazonaws.com/{config[api][stage]}",
            "functionArn": _LAMBDA_ARN,
        },
        "lambda:function": _LAMBDA_FUNCTION_TEMPLATE,
    },
)

LAMBDA_WORKER = ComponentKind(
    type="lambda-worker",
    compute=True,
    config_schema=_object(
        dict(
            _LAMBDA_PROPERTIES,
            batchSize={"type": "integer", "minimum": 1, "maximum": 10000},
        ),
        required=["handler"],
    ),
    provides=("lambda:function",),
    fallbacks={
        "runtime": "python3.12",
        "memorySize": 256,
        "timeout": 60,
        "logRetentionDays": 14,
        "tracing": "PassThrough",
        "environmentVariables": {},
        "vpc": {"enabled": False},
        "batchSize": 10,
    },
    compliance_defaults=_LAMBDA_COMPLIANCE,
    capability_templates={"lambda:function": _LAMBDA_FUNCTION_TEMPLATE},
)

ECS_FARGATE_SERVICE = ComponentKind(
    type="ecs-fargate-service",
    compute=True,
    config_schema=_object(
        {
            "image": {"type": "string", "minLength": 1},
            "cpu": {"enum": [256, 512, 1024, 2048, 4096]},
            "memory": {"type": "integer", "minimum": 512, "maximum": 30720},
            "desiredCount": {"type": "integer", "minimum": 0},
            "containerPort": _PORT,
            "healthCheckPath": {"type": "string", "pattern": "^/"},
            "logRetentionDays": _LOG_RETENTION,
            "environmentVariables": _STRING_MAP,
            "allowedCidrs": _STRING_LIST,
            "autoScaling": _object(
                {
                    "minCapacity": {"type": "integer", "minimum": 0},
                    "maxCapacity": {"type": "integer", "minimum": 1},
                }
            ),
        },
        required=["image"],
    ),
    provides=("service:ecs",),
    fallbacks={
        "cpu": 256,
        "memory": 512,
        "desiredCount": 1,
        "containerPort": 8080,
        "healthCheckPath": "/health",
        "logRetentionDays": 14,
        "environmentVariables": {},
        "allowedCidrs": [],
        "autoScaling": {"minCapacity": 1, "maxCapacity": 2},
    },
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {"logRetentionDays": 90, "desiredCount": 2},
        "fedramp-high": {
            "logRetentionDays": 365,
            "desiredCount": 2,
            "autoScaling": {"minCapacity": 2},
        },
    },
    capability_templates={
        "service:ecs": {
            "serviceArn": "arn:aws:ecs:{region}:{account}:service/{service}/{component}",
            "url": "http://{component}.{service}.internal:{config[containerPort]}",
            "port": "{config[containerPort]}",
        }
    },
)

SQS_QUEUE = ComponentKind(
    type="sqs-queue",
    config_schema=_object(
        {
            "fifo": {"type": "boolean"},
            "visibilityTimeout": {"type": "integer", "minimum": 0, "maximum": 43200},
            "messageRetentionPeriod": {"type": "integer", "minimum": 60, "maximum": 1209600},
            "encryption": {"enum": ["sqs-managed", "kms"]},
            "deadLetterQueue": _object(
                {
                    "enabled": {"type": "boolean"},
                    "maxReceiveCount": {"type": "integer", "minimum": 1},
                }
            ),
        }
    ),
    provides=("queue:sqs",),
    fallbacks={
        "fifo": False,
        "visibilityTimeout": 30,
        "messageRetentionPeriod": 345600,
        "encryption": "sqs-managed",
        "deadLetterQueue": {"enabled": False, "maxReceiveCount": 3},
    },
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {"encryption": "kms", "deadLetterQueue": {"enabled": True}},
        "fedramp-high": {
            "encryption": "kms",
            "messageRetentionPeriod": 1209600,
            "deadLetterQueue": {"enabled": True},
        },
    },
    capability_templates={
        "queue:sqs": {
            "queueName": _NAME,
            "queueUrl": "https://sqs.{region}.amazonaws.com/{account}/" + _NAME,
            "queueArn": "arn:aws:sqs:{region}:{account}:" + _NAME,
        }
    },
)

RDS_POSTGRES = ComponentKind(
    type="rds-postgres",
    config_schema=_object(
        {
            "engineVersion": {"type": "string"},
            "instanceClass": {"type": "string", "pattern": "^db\\."},
            "allocatedStorage": {"type": "integer", "minimum": 20, "maximum": 65536},
            "multiAz": {"type": "boolean"},
            "backupRetentionDays": {"type": "integer", "minimum": 0, "maximum": 35},
            "storageEncrypted": {"type": "boolean"},
            "deletionProtection": {"type": "boolean"},
            "performanceInsights": {"type": "boolean"},
            "publiclyAccessible": {"type": "boolean"},
            "port": _PORT,
            "dbName": {"type": "string", "pattern": "^[A-Za-z][A-Za-z0-9_]*$"},
        }
    ),
    provides=("db:postgres",),
    fallbacks={
        "engineVersion": "15",
        "instanceClass": "db.t3.micro",
        "allocatedStorage": 20,
        "multiAz": False,
        "backupRetentionDays": 1,
        "storageEncrypted": True,
        "deletionProtection": False,
        "performanceInsights": False,
        "publiclyAccessible": False,
        "port": 5432,
        "dbName": "app",
    },
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {
            "backupRetentionDays": 7,
            "deletionProtection": True,
            "performanceInsights": True,
        },
        "fedramp-high": {
            "backupRetentionDays": 35,
            "multiAz": True,
            "deletionProtection": True,
            "performanceInsights": True,
        },
    },
    capability_templates={
        "db:postgres": {
            "host": _NAME + ".db.{region}.rds.amazonaws.com",
            "port": "{config[port]}",
            "dbName": "{config[dbName]}",
            "secretArn": "arn:aws:secretsmanager:{region}:{account}:secret:" + _NAME + "-credentials",
            "instanceArn": "arn:aws:rds:{region}:{account}:db:" + _NAME,
        }
    },
)

S3_BUCKET = ComponentKind(
    type="s3-bucket",
    config_schema=_object(
        {
            "versioning": {"type": "boolean"},
            "encryption": {"enum": ["s3-managed", "kms"]},
            "blockPublicAccess": {"type": "boolean"},
            "objectLock": {"type": "boolean"},
            "lifecycleDays": {"type": "integer", "minimum": 1},
            "cors": _object({"allowOrigins": _STRING_LIST}),
        }
    ),
    provides=("bucket:s3",),
    fallbacks={
        "versioning": False,
        "encryption": "s3-managed",
        "blockPublicAccess": True,
        "objectLock": False,
        "cors": {"allowOrigins": []},
    },
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {"versioning": True, "encryption": "kms"},
        "fedramp-high": {"versioning": True, "encryption": "kms", "objectLock": True},
    },
    capability_templates={
        "bucket:s3": {
            "bucketName": _NAME + "-{account}",
            "bucketArn": "arn:aws:s3:::" + _NAME + "-{account}",
        }
    },
)

ELASTICACHE_REDIS = ComponentKind(
    type="elasticache-redis",
    config_schema=_object(
        {
            "nodeType": {"type": "string", "pattern": "^cache\\."},
            "numCacheNodes": {"type": "integer", "minimum": 1, "maximum": 6},
            "engineVersion": {"type": "string"},
            "port": _PORT,
            "transitEncryption": {"type": "boolean"},
            "atRestEncryption": {"type": "boolean"},
            "multiAz": {"type": "boolean"},
            "authToken": {"type": "boolean"},
        }
    ),
    provides=("cache:redis",),
    fallbacks={
        "nodeType": "cache.t3.micro",
        "numCacheNodes": 1,
        "engineVersion": "7.1",
        "port": 6379,
        "transitEncryption": True,
        "atRestEncryption": True,
        "multiAz": False,
        "authToken": False,
    },
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {"authToken": True},
        "fedramp-high": {"authToken": True, "multiAz": True, "numCacheNodes": 2},
    },
    capability_templates={
        "cache:redis": {
            "host": _NAME + ".cache.{region}.amazonaws.com",
            "port": "{config[port]}",
            "authSecretArn": "arn:aws:secretsmanager:{region}:{account}:secret:" + _NAME + "-auth",
            "clusterArn": "arn:aws:elasticache:{region}:{account}:replicationgroup:" + _NAME,
        }
    },
)

_KEY_SCHEMA = _object(
    {"name": {"type": "string", "minLength": 1}, "type": {"enum": ["S", "N", "B"]}},
    required=["name", "type"],
)

DYNAMODB_TABLE = ComponentKind(
    type="dynamodb-table",
    config_schema=_object(
        {
            "partitionKey": _KEY_SCHEMA,
            "sortKey": _KEY_SCHEMA,
            "billingMode": {"enum": ["PAY_PER_REQUEST", "PROVISIONED"]},
            "readCapacity": {"type": "integer", "minimum": 1},
            "writeCapacity": {"type": "integer", "minimum": 1},
            "pointInTimeRecovery": {"type": "boolean"},
            "encryption": {"enum": ["aws-owned", "aws-managed", "customer-managed"]},
            "ttlAttribute": {"type": "string"},
        }
    ),
    provides=("db:dynamodb",),
    fallbacks={
        "partitionKey": {"name": "pk", "type": "S"},
        "billingMode": "PAY_PER_REQUEST",
        "pointInTimeRecovery": False,
        "encryption": "aws-owned",
    },
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {"pointInTimeRecovery": True, "encryption": "aws-managed"},
        "fedramp-high": {"pointInTimeRecovery": True, "encryption": "customer-managed"},
    },
    capability_templates={
        "db:dynamodb": {
            "tableName": _NAME,
            "tableArn": "arn:aws:dynamodb:{region}:{account}:table/" + _NAME,
        }
    },
)

SNS_TOPIC = ComponentKind(
    type="sns-topic",
    config_schema=_object(
        {
            "fifo": {"type": "boolean"},
            "displayName": {"type": "string", "maxLength": 100},
            "encryption": {"enum": ["sns-managed", "kms"]},
        }
    ),
    provides=("topic:sns",),
    fallbacks={"fifo": False, "encryption": "sns-managed"},
    compliance_defaults={
        "commercial": {},
        "fedramp-moderate": {"encryption": "kms"},
        "fedramp-high": {"encryption": "kms"},
    },
    capability_templates={
        "topic:sns": {
            "topicName": _NAME,
            "topicArn": "arn:aws:sns:{region}:{account}:" + _NAME,
        }
    },
)


BUILTIN_KINDS = (
    LAMBDA_API,
    LAMBDA_WORKER,
    ECS_FARGATE_SERVICE,
    SQS_QUEUE,
    RDS_POSTGRES,
    S3_BUCKET,
    ELASTICACHE_REDIS,
    DYNAMODB_TABLE,
    SNS_TOPIC,
)


def default_registry() -> ComponentRegistry:
    return ComponentRegistry(BUILTIN_KINDS)
