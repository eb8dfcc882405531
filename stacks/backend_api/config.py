"""Configuration management for the backend API deployment.

This module provides the configuration classes consumed by every construct of
the backend API stack. Values are validated when the configuration is built,
so malformed input fails before any construct is created rather than at
CloudFormation apply time.
"""

import ipaddress
from dataclasses import dataclass
from enum import Enum
from typing import Any

from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_logs as logs
from constructs import Node

from .constants import (
    APP_PORT,
    CERTIFICATE_REGION,
    CONTAINER_BUILD_CONTEXT,
    DESIRED_COUNT,
    DOMAIN_NAME,
    FARGATE_MEMORY_BY_CPU,
    HEALTH_CHECK_PATH,
    HEALTHY_HTTP_CODES,
    LISTENER_PORT,
    LOG_RETENTION,
    LOG_STREAM_PREFIX,
    MAX_AZS,
    PROJECT_NAME,
    RECORD_SUBDOMAIN,
    SUBNET_CIDR_MASK,
    TASK_CPU,
    TASK_MEMORY_MIB,
    VPC_CIDR,
)

# Smallest subnet AWS allows inside a VPC
MAX_SUBNET_MASK = 28

# CDK context keys that may override configuration defaults
CONTEXT_KEYS: dict[str, str] = {
    "domainName": "domain_name",
    "projectName": "project_name",
    "containerBuildContext": "container_build_context",
    "certificateRegion": "certificate_region",
    "certificateName": "certificate_name",
}


class Reachability(Enum):
    """Reachability class of a subnet group."""

    PUBLIC = "public"
    ISOLATED = "isolated"

    @property
    def subnet_type(self) -> ec2.SubnetType:
        if self is Reachability.PUBLIC:
            return ec2.SubnetType.PUBLIC
        return ec2.SubnetType.PRIVATE_ISOLATED


@dataclass(frozen=True)
class SubnetGroup:
    """Subnet group configuration for the VPC.

    Attributes:
        name: Subnet group name, used for CDK logical ids and subnet tags.
        cidr_mask: Prefix length of each subnet in the group.
        reachability: Whether the group routes to the internet gateway.
    """

    name: str
    cidr_mask: int
    reachability: Reachability

    def to_subnet_configuration(self) -> ec2.SubnetConfiguration:
        return ec2.SubnetConfiguration(
            name=self.name,
            cidr_mask=self.cidr_mask,
            subnet_type=self.reachability.subnet_type,
        )


DEFAULT_SUBNET_GROUPS: tuple[SubnetGroup, ...] = (
    SubnetGroup("PublicSubnet", SUBNET_CIDR_MASK, Reachability.PUBLIC),
    SubnetGroup("PrivateIsolatedSubnet", SUBNET_CIDR_MASK, Reachability.ISOLATED),
)


@dataclass(frozen=True)
class BackendApiConfig:
    """Configuration for the backend API deployment.

    Replaces module-level globals with one explicit struct handed to the stack
    and to each construct it composes.

    Attributes:
        domain_name: Apex domain of the existing public hosted zone.
        project_name: Prefix applied to every named resource.
        vpc_cidr: CIDR block for the VPC.
        subnet_groups: Ordered subnet groups partitioning the VPC range.
        max_azs: Number of availability zones each subnet group spans.
        enable_dns_hostnames: Whether to enable DNS hostnames in the VPC.
        enable_dns_support: Whether to enable DNS resolution in the VPC.
        enable_flow_logs: Whether to ship VPC flow logs to CloudWatch.
        listener_port: HTTPS port the load balancer listens on.
        app_port: Port the container serves on and the target group forwards to.
        health_check_path: Path polled by the target group health check.
        healthy_http_codes: Status codes the health check accepts.
        cpu: Fargate task CPU units.
        memory_limit_mib: Fargate task memory in MiB.
        desired_count: Number of running task replicas.
        container_build_context: Directory holding the container Dockerfile.
        log_stream_prefix: Prefix for the container's CloudWatch log streams.
        log_retention: Retention window of the container and flow log groups.
        record_subdomain: Subdomain aliased to the load balancer.
        certificate_region: Region the certificate is issued in.
        certificate_name: Display name of the certificate, `<prefix>-certificate`
            when unset.
    """

    domain_name: str = DOMAIN_NAME
    project_name: str = PROJECT_NAME
    vpc_cidr: str = VPC_CIDR
    subnet_groups: tuple[SubnetGroup, ...] = DEFAULT_SUBNET_GROUPS
    max_azs: int = MAX_AZS
    enable_dns_hostnames: bool = True
    enable_dns_support: bool = True
    enable_flow_logs: bool = True
    listener_port: int = LISTENER_PORT
    app_port: int = APP_PORT
    health_check_path: str = HEALTH_CHECK_PATH
    healthy_http_codes: str = HEALTHY_HTTP_CODES
    cpu: int = TASK_CPU
    memory_limit_mib: int = TASK_MEMORY_MIB
    desired_count: int = DESIRED_COUNT
    container_build_context: str = CONTAINER_BUILD_CONTEXT
    log_stream_prefix: str = LOG_STREAM_PREFIX
    log_retention: logs.RetentionDays = LOG_RETENTION
    record_subdomain: str = RECORD_SUBDOMAIN
    certificate_region: str | None = CERTIFICATE_REGION
    certificate_name: str | None = None

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.domain_name:
            msg = "domain_name must not be empty."
            raise ValueError(msg)
        if not self.project_name:
            msg = "project_name must not be empty."
            raise ValueError(msg)

        for label, port in (
            ("listener_port", self.listener_port),
            ("app_port", self.app_port),
        ):
            if not 1 <= port <= 65535:
                msg = f"{label} must be between 1 and 65535, got {port}."
                raise ValueError(msg)

        if self.desired_count < 0:
            msg = f"desired_count must not be negative, got {self.desired_count}."
            raise ValueError(msg)

        if not self.health_check_path.startswith("/"):
            msg = f"health_check_path must start with '/', got {self.health_check_path!r}."
            raise ValueError(msg)

        self._validate_fargate_size()
        self._validate_subnet_groups()

    def _validate_fargate_size(self) -> None:
        allowed_memory = FARGATE_MEMORY_BY_CPU.get(self.cpu)
        if allowed_memory is None:
            msg = (
                f"Unsupported Fargate CPU value {self.cpu}. "
                f"Expected one of {sorted(FARGATE_MEMORY_BY_CPU)}."
            )
            raise ValueError(msg)
        if self.memory_limit_mib not in allowed_memory:
            msg = (
                f"Fargate does not accept {self.memory_limit_mib} MiB with {self.cpu} CPU "
                f"units. Allowed range: {allowed_memory[0]}-{allowed_memory[-1]} MiB."
            )
            raise ValueError(msg)

    def _validate_subnet_groups(self) -> None:
        """Check that the subnet groups can partition the VPC range.

        Raises:
            ValueError: If the CIDR is invalid, a mask does not fit, names
                collide, no public group exists, or the groups cannot be
                laid out inside the VPC range.
        """
        try:
            network = ipaddress.IPv4Network(self.vpc_cidr)
        except ValueError as e:
            msg = f"Invalid VPC CIDR {self.vpc_cidr!r}: {e}"
            raise ValueError(msg) from e

        if not self.subnet_groups:
            msg = "At least one subnet group is required."
            raise ValueError(msg)

        names = [group.name for group in self.subnet_groups]
        if len(set(names)) != len(names):
            msg = f"Subnet group names must be unique, got {names}."
            raise ValueError(msg)

        if not any(g.reachability is Reachability.PUBLIC for g in self.subnet_groups):
            msg = "An internet-facing load balancer requires a public subnet group."
            raise ValueError(msg)

        if self.max_azs < 1:
            msg = f"max_azs must be at least 1, got {self.max_azs}."
            raise ValueError(msg)

        required = 0
        for group in self.subnet_groups:
            if not network.prefixlen < group.cidr_mask <= MAX_SUBNET_MASK:
                msg = (
                    f"Subnet group {group.name!r} mask /{group.cidr_mask} must be "
                    f"between /{network.prefixlen + 1} and /{MAX_SUBNET_MASK}."
                )
                raise ValueError(msg)
            required += 2 ** (32 - group.cidr_mask) * self.max_azs

        if required > network.num_addresses:
            msg = (
                f"Subnet groups need {required} addresses across {self.max_azs} AZs "
                f"but {self.vpc_cidr} holds only {network.num_addresses}."
            )
            raise ValueError(msg)

        # Subnets are carved in group order, one per AZ, each starting on a
        # boundary of its own size
        offset = 0
        for group in self.subnet_groups:
            size = 2 ** (32 - group.cidr_mask)
            for _ in range(self.max_azs):
                start = -(-offset // size) * size
                if start + size > network.num_addresses:
                    msg = (
                        f"Subnet group {group.name!r} does not fit in {self.vpc_cidr}: "
                        f"a /{group.cidr_mask} subnet aligned after the preceding "
                        "subnets runs past the end of the range."
                    )
                    raise ValueError(msg)
                offset = start + size

    @property
    def record_name(self) -> str:
        """Fully qualified name of the alias record."""
        return f"{self.record_subdomain}.{self.domain_name}"

    @property
    def service_url(self) -> str:
        """Public URL the backend API is served on."""
        if self.listener_port == 443:
            return f"https://{self.record_name}"
        return f"https://{self.record_name}:{self.listener_port}"

    def resource_name(self, suffix: str) -> str:
        """Build a prefixed resource name."""
        return f"{self.project_name}-{suffix}"

    @classmethod
    def from_context(cls, node: Node, **overrides: Any) -> "BackendApiConfig":
        """Create configuration from CDK context values.

        Context keys listed in ``CONTEXT_KEYS`` replace the matching defaults;
        explicit keyword overrides take precedence over context.

        Args:
            node: Construct node to read context from, usually ``app.node``.
            **overrides: Field values applied after context resolution.

        Returns:
            Validated configuration instance.
        """
        values: dict[str, Any] = {}
        for context_key, field_name in CONTEXT_KEYS.items():
            value = node.try_get_context(context_key)
            if value is not None:
                values[field_name] = value
        values.update(overrides)
        return cls(**values)
