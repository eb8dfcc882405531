"""Network infrastructure for the backend API.

Creates the VPC that hosts the load balancer and the Fargate service. The VPC
carries only public and private-isolated subnet groups, so no NAT gateway is
provisioned; the service reaches the internet through its public IP.
"""

import logging
from typing import cast

from aws_cdk import RemovalPolicy
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_iam as iam
from aws_cdk import aws_logs as logs
from cdk_nag import NagSuppressions
from constructs import Construct

from .config import BackendApiConfig

logger = logging.getLogger(__name__)


class Network(Construct):
    """VPC and flow logging for the backend API.

    Attributes:
        vpc: VPC partitioned into the configured subnet groups.
        flow_logs: VPC flow log, or None when disabled.
        flow_logs_log_group: Destination log group for flow logs, or None.
    """

    vpc: ec2.Vpc
    flow_logs: ec2.FlowLog | None
    flow_logs_log_group: logs.LogGroup | None

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: BackendApiConfig,
    ) -> None:
        """Initialize the VPC and, when enabled, its flow logs.

        Args:
            scope: CDK construct scope for resource creation.
            construct_id: Unique identifier for this construct.
            config: Deployment configuration.
        """
        super().__init__(scope, construct_id)
        self._config = config
        self.flow_logs = None
        self.flow_logs_log_group = None

        self._create_vpc()
        if config.enable_flow_logs:
            self._create_flow_logs()

    def _create_vpc(self) -> None:
        logger.info(
            "Creating VPC %s with subnet groups %s",
            self._config.vpc_cidr,
            [group.name for group in self._config.subnet_groups],
        )
        self.vpc = ec2.Vpc(
            self,
            "Vpc",
            vpc_name=self._config.resource_name("vpc"),
            ip_addresses=ec2.IpAddresses.cidr(self._config.vpc_cidr),
            max_azs=self._config.max_azs,
            nat_gateways=0,
            enable_dns_hostnames=self._config.enable_dns_hostnames,
            enable_dns_support=self._config.enable_dns_support,
            subnet_configuration=[
                group.to_subnet_configuration() for group in self._config.subnet_groups
            ],
        )

    def _create_flow_logs(self) -> None:
        """Configure VPC Flow Logs delivered to CloudWatch.

        The log group shares the retention window of the application logs.
        """
        self.flow_logs_log_group = logs.LogGroup(
            self,
            "FlowLogsGroup",
            log_group_name=f"/aws/vpc/flowlogs/{self._config.resource_name('vpc')}",
            retention=self._config.log_retention,
            removal_policy=RemovalPolicy.DESTROY,
        )

        flow_logs_role = iam.Role(
            self,
            "FlowLogsRole",
            assumed_by=cast(
                "iam.IPrincipal",
                iam.ServicePrincipal("vpc-flow-logs.amazonaws.com"),
            ),
            inline_policies={
                "FlowLogsDeliveryRolePolicy": iam.PolicyDocument(
                    statements=[
                        iam.PolicyStatement(
                            effect=iam.Effect.ALLOW,
                            actions=[
                                "logs:CreateLogStream",
                                "logs:PutLogEvents",
                                "logs:DescribeLogGroups",
                                "logs:DescribeLogStreams",
                            ],
                            resources=[
                                self.flow_logs_log_group.log_group_arn,
                                f"{self.flow_logs_log_group.log_group_arn}:*",
                            ],
                        ),
                    ],
                ),
            },
        )
        NagSuppressions.add_resource_suppressions(
            flow_logs_role,
            [
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "Flow log delivery writes to streams created under the log group ARN.",
                },
            ],
            apply_to_children=True,
        )

        self.flow_logs = ec2.FlowLog(
            self,
            "FlowLogs",
            resource_type=ec2.FlowLogResourceType.from_vpc(self.vpc),
            destination=ec2.FlowLogDestination.to_cloud_watch_logs(
                self.flow_logs_log_group,
                flow_logs_role,
            ),
            traffic_type=ec2.FlowLogTrafficType.ALL,
        )
