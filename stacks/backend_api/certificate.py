"""Hosted zone lookup and TLS certificate issuance for the backend API.

The hosted zone must already exist; it is resolved through CDK context
lookups at synthesis time. The certificate is validated through DNS records
written into that zone.
"""

import logging

from aws_cdk import Stack, Token
from aws_cdk import aws_certificatemanager as acm
from aws_cdk import aws_route53 as route53
from cdk_nag import NagSuppressions
from constructs import Construct

from .config import BackendApiConfig

logger = logging.getLogger(__name__)


class DomainTrust(Construct):
    """Public hosted zone and DNS-validated certificate.

    Attributes:
        hosted_zone: Existing public hosted zone for the configured domain.
        certificate: DNS-validated certificate for the configured domain.
    """

    hosted_zone: route53.IHostedZone
    certificate: acm.ICertificate

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        config: BackendApiConfig,
    ) -> None:
        """Look up the hosted zone and request the certificate.

        Args:
            scope: CDK construct scope for resource creation.
            construct_id: Unique identifier for this construct.
            config: Deployment configuration.

        Raises:
            ValueError: If the enclosing stack has no concrete account/region,
                which hosted zone lookups require.
        """
        super().__init__(scope, construct_id)
        self._config = config

        stack = Stack.of(self)
        if Token.is_unresolved(stack.region) or Token.is_unresolved(stack.account):
            msg = (
                f"Hosted zone lookup for {config.domain_name} requires the stack "
                "to be deployed to an explicit account and region."
            )
            raise ValueError(msg)

        self.hosted_zone = route53.HostedZone.from_lookup(
            self,
            "HostedZone",
            domain_name=config.domain_name,
        )
        self._create_certificate()

    @property
    def _certificate_name(self) -> str:
        return self._config.certificate_name or self._config.resource_name("certificate")

    @property
    def is_cross_region(self) -> bool:
        """Whether the certificate is issued outside the stack's region."""
        region = self._config.certificate_region
        return region is not None and region != Stack.of(self).region

    def _create_certificate(self) -> None:
        if self.is_cross_region:
            logger.info(
                "Requesting certificate for %s in %s",
                self._config.domain_name,
                self._config.certificate_region,
            )
            self.certificate = acm.DnsValidatedCertificate(
                self,
                "Certificate",
                domain_name=self._config.domain_name,
                hosted_zone=self.hosted_zone,
                region=self._config.certificate_region,
                certificate_name=self._certificate_name,
            )
            NagSuppressions.add_resource_suppressions(
                construct=self.certificate,
                suppressions=[
                    {
                        "id": "AwsSolutions-IAM4",
                        "reason": "Certificate requestor function uses the AWS managed execution policy.",
                    },
                    {
                        "id": "AwsSolutions-IAM5",
                        "reason": "Certificate requestor needs ACM and Route 53 access in another region.",
                    },
                    {
                        "id": "AwsSolutions-L1",
                        "reason": "Certificate requestor runtime is managed by the construct library.",
                    },
                ],
                apply_to_children=True,
            )
            return

        logger.info("Requesting certificate for %s", self._config.domain_name)
        self.certificate = acm.Certificate(
            self,
            "Certificate",
            domain_name=self._config.domain_name,
            certificate_name=self._certificate_name,
            validation=acm.CertificateValidation.from_dns(self.hosted_zone),
        )
