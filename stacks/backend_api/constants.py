"""Configuration constants for the backend API deployment.

This module defines the default deployment parameters shared by every
construct in the backend API stack.
"""

from aws_cdk import aws_logs as logs

DOMAIN_NAME: str = "nikolatec.com"
PROJECT_NAME: str = "backend-api"
STACK_ID: str = "BackendApiStack"

VPC_CIDR: str = "10.1.0.0/16"
SUBNET_CIDR_MASK: int = 24
MAX_AZS: int = 2

LISTENER_PORT: int = 443
APP_PORT: int = 3000
HEALTH_CHECK_PATH: str = "/"
HEALTHY_HTTP_CODES: str = "200"

TASK_CPU: int = 512
TASK_MEMORY_MIB: int = 1024
DESIRED_COUNT: int = 1
MIN_HEALTHY_PERCENT: int = 100

CONTAINER_BUILD_CONTEXT: str = "../backend-api"
LOG_STREAM_PREFIX: str = "nest-app"
LOG_RETENTION: logs.RetentionDays = logs.RetentionDays.ONE_MONTH

RECORD_SUBDOMAIN: str = "backend"
CERTIFICATE_REGION: str = "us-east-1"

# Fargate CPU units mapped to the memory sizes (MiB) each one accepts
FARGATE_MEMORY_BY_CPU: dict[int, tuple[int, ...]] = {
    256: (512, 1024, 2048),
    512: tuple(range(1024, 4096 + 1, 1024)),
    1024: tuple(range(2048, 8192 + 1, 1024)),
    2048: tuple(range(4096, 16384 + 1, 1024)),
    4096: tuple(range(8192, 30720 + 1, 1024)),
    8192: tuple(range(16384, 61440 + 1, 4096)),
    16384: tuple(range(32768, 122880 + 1, 8192)),
}
