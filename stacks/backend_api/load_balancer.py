"""Application load balancer, HTTPS listener and target group.

The load balancer terminates TLS with the issued certificate and forwards all
requests to a single IP target group. Targets failing the health check are
taken out of rotation by the load balancer itself.
"""

import logging

from aws_cdk import aws_certificatemanager as acm
from aws_cdk import aws_ec2 as ec2
from aws_cdk import aws_elasticloadbalancingv2 as elbv2
from cdk_nag import NagSuppressions
from constructs import Construct

from .config import BackendApiConfig

logger = logging.getLogger(__name__)


class LoadBalancer(Construct):
    """Internet-facing load balancer for the backend API.

    Attributes:
        load_balancer: Application load balancer in the public subnets.
        listener: HTTPS listener presenting the certificate.
        target_group: Health-checked IP target group for the service.
    """

    load_balancer: elbv2.ApplicationLoadBalancer
    listener: elbv2.ApplicationListener
    target_group: elbv2.ApplicationTargetGroup

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        security_group: ec2.ISecurityGroup,
        certificate: acm.ICertificate,
        config: BackendApiConfig,
    ) -> None:
        """Initialize the load balancer, listener and target group.

        Args:
            scope: CDK construct scope for resource creation.
            construct_id: Unique identifier for this construct.
            vpc: VPC the load balancer and targets live in.
            security_group: Security group fronting the load balancer.
            certificate: Certificate presented by the HTTPS listener.
            config: Deployment configuration.
        """
        super().__init__(scope, construct_id)
        self._vpc = vpc
        self._config = config

        self._create_load_balancer(security_group)
        self._create_listener(certificate)
        self._create_target_group()
        self.listener.add_target_groups(
            "DefaultHttpsResponse",
            target_groups=[self.target_group],
        )

    def _create_load_balancer(self, security_group: ec2.ISecurityGroup) -> None:
        name = self._config.resource_name("alb")
        logger.info("Creating application load balancer %s", name)
        self.load_balancer = elbv2.ApplicationLoadBalancer(
            self,
            "LoadBalancer",
            vpc=self._vpc,
            internet_facing=True,
            security_group=security_group,
            load_balancer_name=name,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
        )
        NagSuppressions.add_resource_suppressions(
            construct=self.load_balancer,
            suppressions=[
                {
                    "id": "AwsSolutions-ELB2",
                    "reason": "Access logs are not collected for the backend API load balancer.",
                },
            ],
        )

    def _create_listener(self, certificate: acm.ICertificate) -> None:
        # Ingress is owned by the load balancer security group
        self.listener = self.load_balancer.add_listener(
            "HttpsListener",
            port=self._config.listener_port,
            protocol=elbv2.ApplicationProtocol.HTTPS,
            open=False,
            certificates=[
                elbv2.ListenerCertificate.from_certificate_manager(certificate),
            ],
        )

    def _create_target_group(self) -> None:
        """Create the IP target group polled on the health check path."""
        self.target_group = elbv2.ApplicationTargetGroup(
            self,
            "TargetGroup",
            vpc=self._vpc,
            port=self._config.app_port,
            protocol=elbv2.ApplicationProtocol.HTTP,
            target_type=elbv2.TargetType.IP,
            target_group_name=self._config.resource_name("target-group"),
            health_check=elbv2.HealthCheck(
                path=self._config.health_check_path,
                healthy_http_codes=self._config.healthy_http_codes,
            ),
        )
