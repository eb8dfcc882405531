"""ECS cluster and Fargate service for the backend API.

This module creates the cluster, the task definition with its single
container built from the local build context, the log group the container
ships to, and the long-running service that keeps the task alive.
"""

import logging

from aws_cdk import RemovalPolicy
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_ecs as ecs
from aws_cdk import aws_elasticloadbalancingv2 as elbv2
from aws_cdk import aws_logs as logs
from cdk_nag import NagSuppressions
from constructs import Construct

from .config import BackendApiConfig
from .constants import MIN_HEALTHY_PERCENT

logger = logging.getLogger(__name__)


class Compute(Construct):
    """Container orchestration for the backend API.

    Attributes:
        cluster: ECS cluster scoped to the VPC.
        log_group: CloudWatch log group receiving container logs.
        task_definition: Fargate task definition for the API container.
        container: The API container definition.
        service: Fargate service running the task definition.
    """

    cluster: ecs.Cluster
    log_group: logs.LogGroup
    task_definition: ecs.FargateTaskDefinition
    container: ecs.ContainerDefinition
    service: ecs.FargateService

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        security_group: ec2.ISecurityGroup,
        config: BackendApiConfig,
    ) -> None:
        """Initialize cluster, task definition and service.

        Args:
            scope: CDK construct scope for resource creation.
            construct_id: Unique identifier for this construct.
            vpc: VPC the cluster and tasks run in.
            security_group: Security group attached to the running tasks.
            config: Deployment configuration.
        """
        super().__init__(scope, construct_id)
        self._vpc = vpc
        self._config = config

        self._create_cluster()
        self._create_log_group()
        self._create_task_definition()
        self._create_service(security_group)

    def _create_cluster(self) -> None:
        name = self._config.resource_name("cluster")
        logger.info("Creating ECS cluster %s", name)
        self.cluster = ecs.Cluster(
            self,
            "Cluster",
            cluster_name=name,
            vpc=self._vpc,
            container_insights_v2=ecs.ContainerInsights.ENHANCED,
        )

    def _create_log_group(self) -> None:
        self.log_group = logs.LogGroup(
            self,
            "LogGroup",
            log_group_name=f"/ecs/{self._config.project_name}",
            retention=self._config.log_retention,
            removal_policy=RemovalPolicy.DESTROY,
        )

    def _create_task_definition(self) -> None:
        """Create the Fargate task definition and its container.

        The image is built from the configured build context when the stack
        is synthesized; a missing Dockerfile fails construction.
        """
        self.task_definition = ecs.FargateTaskDefinition(
            self,
            "TaskDefinition",
            family=self._config.resource_name("task-def"),
            cpu=self._config.cpu,
            memory_limit_mib=self._config.memory_limit_mib,
        )

        logger.info(
            "Building container image from %s",
            self._config.container_build_context,
        )
        self.container = self.task_definition.add_container(
            "Container",
            container_name=self._config.resource_name("container"),
            image=ecs.ContainerImage.from_asset(self._config.container_build_context),
            logging=ecs.LogDrivers.aws_logs(
                stream_prefix=self._config.log_stream_prefix,
                log_group=self.log_group,
            ),
        )
        self.container.add_port_mappings(
            ecs.PortMapping(
                container_port=self._config.app_port,
                host_port=self._config.app_port,
            ),
        )

        NagSuppressions.add_resource_suppressions(
            construct=self.task_definition,
            suppressions=[
                {
                    "id": "AwsSolutions-IAM5",
                    "reason": "Pulling the asset image requires ecr:GetAuthorizationToken on all resources.",
                },
            ],
            apply_to_children=True,
        )

    def _create_service(self, security_group: ec2.ISecurityGroup) -> None:
        name = self._config.resource_name("service")
        logger.info(
            "Creating Fargate service %s with %d task(s)",
            name,
            self._config.desired_count,
        )
        self.service = ecs.FargateService(
            self,
            "Service",
            cluster=self.cluster,
            service_name=name,
            task_definition=self.task_definition,
            desired_count=self._config.desired_count,
            min_healthy_percent=MIN_HEALTHY_PERCENT,
            assign_public_ip=True,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
            security_groups=[security_group],
            circuit_breaker=ecs.DeploymentCircuitBreaker(enable=True, rollback=True),
        )

    def attach_to(self, target_group: elbv2.IApplicationTargetGroup) -> None:
        """Register the service's tasks in a load balancer target group.

        Also opens the application port on the task security group to the
        load balancers of the target group's listeners.

        Args:
            target_group: Target group forwarding to the application port.
        """
        logger.info("Attaching service to target group")
        self.service.attach_to_application_target_group(target_group)
