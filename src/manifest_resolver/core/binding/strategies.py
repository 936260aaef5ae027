# src/manifest_resolver/core/binding/strategies.py
"""
Estratégias concretas: compute → serviços gerenciados.

Origens compute: `lambda-api`, `lambda-worker`, `ecs-fargate-service`.
Cada estratégia cobre exatamente uma capability, de modo que o par
(tipo de origem, capability) nunca é aceito por mais de uma.
"""

from __future__ import annotations

from typing import Any, Dict, List

from .strategy import BinderStrategy, BindingContext, statement


COMPUTE_TYPES = ("lambda-api", "lambda-worker", "ecs-fargate-service")

_ALL_ACCESS = ("read", "write", "readwrite", "admin")


def _ingress(context: BindingContext) -> Dict[str, Any]:
    port = context.capability.data.get("port")
    return {
        "ingressRules": [
            {
                "from": context.source.name,
                "to": context.target.name,
                "port": int(port) if port is not None else None,
                "protocol": "tcp",
            }
        ]
    }


class ComputeToSqsStrategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("sqs-queue",)
    CAPABILITY = "queue:sqs"
    SUPPORTED_ACCESS = _ALL_ACCESS
    DESCRIPTION = "Consume from and/or send to an SQS queue"
    DEFAULT_ENV = {"queueUrl": "QUEUE_URL", "queueArn": "QUEUE_ARN"}
    IAM_SERVICE = "sqs"
    ARN_FIELD = "queueArn"
    MONITORING_ACTIONS = ("sqs:GetQueueAttributes", "sqs:ListQueueTags")
    ACTIONS = {
        "read": (
            "sqs:ReceiveMessage",
            "sqs:DeleteMessage",
            "sqs:ChangeMessageVisibility",
            "sqs:GetQueueAttributes",
            "sqs:GetQueueUrl",
        ),
        "write": ("sqs:SendMessage", "sqs:GetQueueAttributes", "sqs:GetQueueUrl"),
    }
    ADMIN_ACTIONS = ("sqs:PurgeQueue",)

    def permissions(self, context: BindingContext) -> List[Dict[str, Any]]:
        out = super().permissions(context)
        # Worker com DLQ precisa devolver mensagens à fila
        if context.directive.options.get("deadLetterQueue") and context.source.type == "lambda-worker":
            out.append(
                statement(
                    "Allow",
                    ["sqs:GetQueueAttributes", "sqs:ChangeMessageVisibility"],
                    [self.resource_arn(context)],
                )
            )
        return out

    def additional(self, context: BindingContext) -> Dict[str, Any]:
        if context.source.type != "lambda-worker" or context.directive.access not in ("read", "readwrite", "admin"):
            return {}
        return {
            "eventSources": [
                {
                    "type": "sqs",
                    "queueArn": self.resource_arn(context),
                    "batchSize": context.source_config.get("batchSize", 10),
                }
            ]
        }


class ComputeToRdsPostgresStrategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("rds-postgres",)
    CAPABILITY = "db:postgres"
    SUPPORTED_ACCESS = _ALL_ACCESS
    DESCRIPTION = "Connect to a PostgreSQL instance using its managed credentials"
    DEFAULT_ENV = {
        "host": "DB_HOST",
        "port": "DB_PORT",
        "dbName": "DB_NAME",
        "secretArn": "DB_SECRET_ARN",
    }
    IAM_SERVICE = "rds"
    ARN_FIELD = "secretArn"
    MONITORING_ACTIONS = ("rds:DescribeDBInstances", "rds:ListTagsForResource")
    # Qualquer acesso ao banco passa pela leitura do segredo de credenciais
    ACTIONS = {
        "read": ("secretsmanager:GetSecretValue", "secretsmanager:DescribeSecret"),
        "write": ("secretsmanager:GetSecretValue", "secretsmanager:DescribeSecret"),
    }
    ADMIN_ACTIONS = ("secretsmanager:PutSecretValue", "secretsmanager:UpdateSecret")

    def permissions(self, context: BindingContext) -> List[Dict[str, Any]]:
        out = super().permissions(context)
        iam_auth = context.directive.options.get("iamAuth")
        if iam_auth:
            username = "app_user"
            if isinstance(iam_auth, dict) and iam_auth.get("username"):
                username = str(iam_auth["username"])
            out.append(
                statement(
                    "Allow",
                    ["rds-db:connect"],
                    [
                        f"arn:aws:rds-db:{context.region}:{context.account}:dbuser:"
                        f"{context.target.name}/{username}"
                    ],
                )
            )
        return out

    def network(self, context: BindingContext) -> Dict[str, Any]:
        return _ingress(context)


class ComputeToS3Strategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("s3-bucket",)
    CAPABILITY = "bucket:s3"
    SUPPORTED_ACCESS = _ALL_ACCESS
    DESCRIPTION = "Read and/or write objects in an S3 bucket"
    DEFAULT_ENV = {"bucketName": "BUCKET_NAME", "bucketArn": "BUCKET_ARN"}
    IAM_SERVICE = "s3"
    ARN_FIELD = "bucketArn"
    MONITORING_ACTIONS = ("s3:GetBucketLogging", "s3:GetBucketVersioning")
    ACTIONS = {
        "read": ("s3:GetObject", "s3:ListBucket"),
        "write": ("s3:PutObject", "s3:DeleteObject"),
    }
    ADMIN_ACTIONS = (
        "s3:GetBucketPolicy",
        "s3:PutBucketPolicy",
        "s3:GetBucketVersioning",
        "s3:PutBucketVersioning",
    )

    def resources(self, context: BindingContext) -> List[str]:
        arn = self.resource_arn(context)
        return [arn, f"{arn}/*"]

    def permissions(self, context: BindingContext) -> List[Dict[str, Any]]:
        out = super().permissions(context)
        if context.directive.options.get("kmsEncryption"):
            out.append(
                statement(
                    "Allow",
                    ["kms:Decrypt", "kms:DescribeKey", "kms:Encrypt", "kms:GenerateDataKey"],
                    [str(context.directive.options.get("kmsKeyId") or "alias/aws/s3")],
                    {"StringEquals": {"kms:ViaService": f"s3.{context.region}.amazonaws.com"}},
                )
            )
        return out


class ComputeToRedisStrategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("elasticache-redis",)
    CAPABILITY = "cache:redis"
    SUPPORTED_ACCESS = ("read", "write", "readwrite")
    DESCRIPTION = "Connect to a Redis replication group over the network"
    DEFAULT_ENV = {"host": "REDIS_HOST", "port": "REDIS_PORT"}
    IAM_SERVICE = "elasticache"
    ARN_FIELD = "clusterArn"
    MONITORING_ACTIONS = ("elasticache:DescribeReplicationGroups",)

    def env_vars(self, context: BindingContext) -> Dict[str, str]:
        out = super().env_vars(context)
        if context.target_config.get("authToken") and "authSecretArn" in context.capability.data:
            name = context.directive.env.get("authSecretArn", "REDIS_AUTH_SECRET_ARN")
            out[name] = str(context.capability.data["authSecretArn"])
        return out

    def permissions(self, context: BindingContext) -> List[Dict[str, Any]]:
        if not context.target_config.get("authToken"):
            return []
        return [
            statement(
                "Allow",
                ["secretsmanager:GetSecretValue"],
                [str(context.capability.data.get("authSecretArn", "*"))],
            )
        ]

    def network(self, context: BindingContext) -> Dict[str, Any]:
        return _ingress(context)


class ComputeToDynamoDbStrategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("dynamodb-table",)
    CAPABILITY = "db:dynamodb"
    SUPPORTED_ACCESS = _ALL_ACCESS
    DESCRIPTION = "Read and/or write items in a DynamoDB table"
    DEFAULT_ENV = {"tableName": "TABLE_NAME", "tableArn": "TABLE_ARN"}
    IAM_SERVICE = "dynamodb"
    ARN_FIELD = "tableArn"
    MONITORING_ACTIONS = ("dynamodb:DescribeTable", "dynamodb:ListTagsOfResource")
    ACTIONS = {
        "read": (
            "dynamodb:GetItem",
            "dynamodb:BatchGetItem",
            "dynamodb:Query",
            "dynamodb:Scan",
            "dynamodb:DescribeTable",
        ),
        "write": (
            "dynamodb:PutItem",
            "dynamodb:UpdateItem",
            "dynamodb:DeleteItem",
            "dynamodb:BatchWriteItem",
        ),
    }
    ADMIN_ACTIONS = ("dynamodb:UpdateTable", "dynamodb:UpdateTimeToLive")

    def resources(self, context: BindingContext) -> List[str]:
        arn = self.resource_arn(context)
        return [arn, f"{arn}/index/*"]


class ComputeToSnsStrategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("sns-topic",)
    CAPABILITY = "topic:sns"
    SUPPORTED_ACCESS = ("write", "admin")
    DESCRIPTION = "Publish to an SNS topic"
    DEFAULT_ENV = {"topicArn": "TOPIC_ARN"}
    IAM_SERVICE = "sns"
    ARN_FIELD = "topicArn"
    MONITORING_ACTIONS = ("sns:GetTopicAttributes", "sns:ListTagsForResource")
    ACTIONS = {"write": ("sns:Publish",)}
    ADMIN_ACTIONS = ("sns:GetTopicAttributes", "sns:SetTopicAttributes", "sns:Subscribe")


class ComputeToLambdaStrategy(BinderStrategy):
    SOURCE_TYPES = COMPUTE_TYPES
    TARGET_TYPES = ("lambda-api", "lambda-worker")
    CAPABILITY = "lambda:function"
    SUPPORTED_ACCESS = ("write", "admin")
    DESCRIPTION = "Invoke another function"
    DEFAULT_ENV = {"functionName": "FUNCTION_NAME", "functionArn": "FUNCTION_ARN"}
    IAM_SERVICE = "lambda"
    ARN_FIELD = "functionArn"
    MONITORING_ACTIONS = ("lambda:GetFunctionConfiguration",)
    ACTIONS = {"write": ("lambda:InvokeFunction",)}
    ADMIN_ACTIONS = ("lambda:GetFunction", "lambda:GetFunctionConfiguration")


BUILTIN_STRATEGIES = (
    ComputeToSqsStrategy,
    ComputeToRdsPostgresStrategy,
    ComputeToS3Strategy,
    ComputeToRedisStrategy,
    ComputeToDynamoDbStrategy,
    ComputeToSnsStrategy,
    ComputeToLambdaStrategy,
)
