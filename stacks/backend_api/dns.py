"""Alias record binding the backend API subdomain to the load balancer."""

import logging

from aws_cdk import aws_elasticloadbalancingv2 as elbv2
from aws_cdk import aws_route53 as route53
from aws_cdk import aws_route53_targets as route53_targets
from constructs import Construct

from .config import BackendApiConfig

logger = logging.getLogger(__name__)


class AliasRecord(Construct):
    """A record resolving the API subdomain to the load balancer by alias.

    Attributes:
        record: Route 53 A record with an alias target.
    """

    record: route53.ARecord

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        hosted_zone: route53.IHostedZone,
        load_balancer: elbv2.IApplicationLoadBalancer,
        config: BackendApiConfig,
    ) -> None:
        super().__init__(scope, construct_id)

        logger.info("Creating alias record %s", config.record_name)
        self.record = route53.ARecord(
            self,
            "AliasRecord",
            zone=hosted_zone,
            record_name=config.record_name,
            target=route53.RecordTarget.from_alias(
                route53_targets.LoadBalancerTarget(load_balancer),
            ),
        )
