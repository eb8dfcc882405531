"""Security groups for the backend API load balancer and Fargate tasks."""

import logging

from aws_cdk import aws_ec2 as ec2
from cdk_nag import NagSuppressions
from constructs import Construct

from .config import BackendApiConfig

logger = logging.getLogger(__name__)


class SecurityGroups(Construct):
    """Traffic filtering for the backend API.

    The load balancer group admits HTTPS from anywhere. The application group
    starts with no ingress rule; the load balancer is granted access to the
    application port when the service is registered in the target group.

    Attributes:
        load_balancer_security_group: Security group fronting the load balancer.
        app_security_group: Security group attached to the Fargate tasks.
    """

    load_balancer_security_group: ec2.SecurityGroup
    app_security_group: ec2.SecurityGroup

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        config: BackendApiConfig,
    ) -> None:
        super().__init__(scope, construct_id)
        self._vpc = vpc
        self._config = config

        self._create_load_balancer_security_group()
        self._create_app_security_group()

    def _create_load_balancer_security_group(self) -> None:
        """Create the security group for the internet-facing load balancer.

        HTTPS on the listener port is the only way into the load balancer.
        """
        name = self._config.resource_name("security-group-elb")
        logger.info("Creating load balancer security group %s", name)
        self.load_balancer_security_group = ec2.SecurityGroup(
            self,
            "LoadBalancerSecurityGroup",
            vpc=self._vpc,
            security_group_name=name,
            description=f"Load balancer security group for {self._config.project_name}",
            allow_all_outbound=True,
        )

        self.load_balancer_security_group.add_ingress_rule(
            peer=ec2.Peer.ipv4("0.0.0.0/0"),
            connection=ec2.Port.tcp(self._config.listener_port),
            description="allow HTTPS traffic from anywhere",
        )

        NagSuppressions.add_resource_suppressions(
            construct=self.load_balancer_security_group,
            suppressions=[
                {
                    "id": "AwsSolutions-EC23",
                    "reason": "The public API load balancer accepts HTTPS from any address.",
                },
            ],
        )

    def _create_app_security_group(self) -> None:
        name = self._config.resource_name("security-group-app")
        logger.info("Creating application security group %s", name)
        self.app_security_group = ec2.SecurityGroup(
            self,
            "AppSecurityGroup",
            vpc=self._vpc,
            security_group_name=name,
            description=f"Application security group for {self._config.project_name}",
            allow_all_outbound=True,
        )
