"""Backend API stack: VPC, ALB, ACM certificate, ECS Fargate and Route 53.

Resources, in dependency order:
    - VPC with public and private-isolated subnets (no NAT gateways)
    - Security groups for the load balancer and the application tasks
    - Hosted zone lookup and DNS-validated certificate
    - Internet-facing ALB with an HTTPS listener and an IP target group
    - ECS cluster, Fargate task definition and service
    - Alias record for the API subdomain
"""

from typing import Any

import cdk_nag
from aws_cdk import Aspects, CfnOutput, Stack
from cdk_nag import NagSuppressions
from constructs import Construct

from .certificate import DomainTrust
from .compute import Compute
from .config import BackendApiConfig
from .dns import AliasRecord
from .load_balancer import LoadBalancer
from .network import Network
from .security import SecurityGroups


class BackendApiStack(Stack):
    """Infrastructure hosting the backend API container.

    Attributes:
        config: Deployment configuration the stack was built from.
        network: VPC and flow logs.
        security_groups: Load balancer and application security groups.
        domain_trust: Hosted zone and certificate.
        load_balancer: ALB, HTTPS listener and target group.
        compute: ECS cluster, task definition and service.
        alias_record: Alias record pointing the API subdomain at the ALB.
    """

    config: BackendApiConfig
    network: Network
    security_groups: SecurityGroups
    domain_trust: DomainTrust
    load_balancer: LoadBalancer
    compute: Compute
    alias_record: AliasRecord

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: BackendApiConfig | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize the backend API stack.

        Args:
            scope: CDK construct scope for resource creation.
            construct_id: Unique identifier for this stack.
            config: Deployment configuration, defaults to ``BackendApiConfig()``.
            **kwargs: Additional arguments passed to parent Stack.
        """
        super().__init__(scope, construct_id, **kwargs)

        self.config = config or BackendApiConfig()

        self.network = Network(self, "Network", config=self.config)
        self.security_groups = SecurityGroups(
            self,
            "SecurityGroups",
            vpc=self.network.vpc,
            config=self.config,
        )
        self.domain_trust = DomainTrust(self, "DomainTrust", config=self.config)
        self.load_balancer = LoadBalancer(
            self,
            "LoadBalancer",
            vpc=self.network.vpc,
            security_group=self.security_groups.load_balancer_security_group,
            certificate=self.domain_trust.certificate,
            config=self.config,
        )
        self.compute = Compute(
            self,
            "Compute",
            vpc=self.network.vpc,
            security_group=self.security_groups.app_security_group,
            config=self.config,
        )
        self.compute.attach_to(self.load_balancer.target_group)
        self.alias_record = AliasRecord(
            self,
            "Dns",
            hosted_zone=self.domain_trust.hosted_zone,
            load_balancer=self.load_balancer.load_balancer,
            config=self.config,
        )

        self._create_outputs()
        self._configure_security_checks()

    def _configure_security_checks(self) -> None:
        """Configures AWS Solutions checks for the stack.

        Resource-specific findings are suppressed next to the resources that
        raise them; only findings caused by intrinsic references are
        suppressed here.
        """
        Aspects.of(self).add(cdk_nag.AwsSolutionsChecks())
        NagSuppressions.add_stack_suppressions(
            stack=self,
            suppressions=[
                {
                    "id": "CdkNagValidationFailure",
                    "reason": "Security group rules reference other groups through intrinsic functions.",
                },
            ],
        )

    def _create_outputs(self) -> None:
        """Create CloudFormation outputs describing the deployed endpoint."""
        outputs = {
            "LoadBalancerDnsName": (
                self.load_balancer.load_balancer.load_balancer_dns_name,
                "Load balancer DNS name",
            ),
            "ServiceUrl": (self.config.service_url, "Public URL of the backend API"),
            "ClusterName": (self.compute.cluster.cluster_name, "ECS cluster name"),
            "ServiceName": (self.compute.service.service_name, "Fargate service name"),
            "TargetGroupArn": (
                self.load_balancer.target_group.target_group_arn,
                "Target group ARN",
            ),
            "CertificateArn": (
                self.domain_trust.certificate.certificate_arn,
                "Certificate ARN",
            ),
            "LogGroupName": (
                self.compute.log_group.log_group_name,
                "CloudWatch log group name",
            ),
        }
        for output_id, (value, description) in outputs.items():
            CfnOutput(self, output_id, value=value, description=description)
