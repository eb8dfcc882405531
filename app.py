"""Entry point for the backend API infrastructure deployment.

This module synthesizes the single backend API stack. It takes no
command-line options; the deployment target is resolved from the environment,
and configuration defaults may be overridden through CDK context.

Environment Configuration Options:
    1. AWS Named Profile:
       AWS_PROFILE: Named profile from AWS credentials file

    2. Direct Environment Variables:
       AWS_DEFAULT_REGION: Target AWS region for deployment
       CDK_DEFAULT_ACCOUNT: Target AWS account for deployment

    ENVIRONMENT: Optional stage name applied as the Environment tag.

Context Overrides (cdk.json or ``cdk synth -c key=value``):
    domainName, projectName, containerBuildContext, certificateRegion,
    certificateName
"""

import logging
import os
from dataclasses import dataclass
from typing import Any

import boto3
from aws_cdk import App, Environment

from stacks.backend_api import BackendApiConfig, BackendApiStack
from stacks.backend_api.constants import STACK_ID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackConfiguration:
    """Configuration settings for stack deployment.

    Attributes:
        stack_id: Fixed identifier of the deployable unit.
        environment: Optional deployment environment name.
        aws_profile: Optional AWS credentials profile name.
    """

    stack_id: str = STACK_ID
    environment: str | None = None
    aws_profile: str | None = None

    @property
    def tags(self) -> dict[str, str]:
        return {
            "Environment": self.environment or "dev",
            "Application": self.stack_id,
            "ManagedBy": "AWS-CDK",
        }


def create_deployment_environment(config: StackConfiguration) -> Environment:
    """Creates CDK Environment from configuration.

    Hosted zone lookups need a concrete account and region, so both are always
    resolved: from the named profile when one is given, otherwise from the
    variables the CDK toolkit exports.

    Args:
        config: Stack configuration containing environment details.

    Returns:
        CDK Environment with account and region resolved.
    """
    if config.aws_profile:
        session = boto3.Session(profile_name=config.aws_profile)
        sts = session.client("sts")
        account = sts.get_caller_identity()["Account"]
        return Environment(
            account=account,
            region=session.region_name or "us-east-1",
        )

    return Environment(
        account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
        region=os.environ.get(
            "AWS_DEFAULT_REGION",
            os.environ.get("CDK_DEFAULT_REGION", "us-east-1"),
        ),
    )


def initialize_app(
    environment: str | None = None,
    aws_profile: str | None = None,
    context: dict[str, Any] | None = None,
) -> App:
    """Initializes and configures the CDK application.

    Args:
        environment: Optional deployment environment name.
        aws_profile: Optional AWS credentials profile to use.
        context: Optional CDK context merged into the app.

    Returns:
        Configured CDK App instance ready for synthesis.
    """
    config = StackConfiguration(environment=environment, aws_profile=aws_profile)
    env = create_deployment_environment(config)
    app = App(context=context)

    backend_config = BackendApiConfig.from_context(app.node)
    logger.info(
        "Configuring %s for %s in %s/%s",
        config.stack_id,
        backend_config.record_name,
        env.account,
        env.region,
    )

    BackendApiStack(
        app,
        config.stack_id,
        config=backend_config,
        env=env,
        description=f"Backend API hosting for {backend_config.record_name}",
        tags=config.tags,
    )

    return app


def main() -> None:
    """Main execution entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    environment = os.environ.get("ENVIRONMENT")
    aws_profile = os.environ.get("AWS_PROFILE")

    app = initialize_app(environment=environment, aws_profile=aws_profile)
    app.synth()


if __name__ == "__main__":
    main()
