"""Global pytest configuration and fixtures for CDK testing."""

import os
import sys
from pathlib import Path

import pytest
from aws_cdk import App, Environment
from aws_cdk.assertions import Template

# Add the project root to Python path for imports
project_path = Path(__file__).parent.parent
if str(project_path) not in sys.path:
    sys.path.insert(0, str(project_path))

from stacks.backend_api import BackendApiConfig, BackendApiStack  # noqa: E402

TEST_ACCOUNT = "123456789012"
TEST_REGION = "us-east-1"
TEST_HOSTED_ZONE_ID = "Z0123456789EXAMPLE"


@pytest.fixture(scope="session", autouse=True)
def configure_test_environment():
    """Configure environment variables for consistent testing."""
    test_env = {
        "AWS_DEFAULT_REGION": TEST_REGION,
        "AWS_REGION": TEST_REGION,
        "CDK_DEFAULT_REGION": TEST_REGION,
        "CDK_DEFAULT_ACCOUNT": TEST_ACCOUNT,
        "CDK_DISABLE_VERSION_CHECK": "true",
        # Prevent actual AWS API calls during testing
        "AWS_ACCESS_KEY_ID": "testing",
        "AWS_SECRET_ACCESS_KEY": "testing",
        "AWS_SECURITY_TOKEN": "testing",
        "AWS_SESSION_TOKEN": "testing",
    }

    for key, value in test_env.items():
        if key not in os.environ:
            os.environ[key] = value


def lookup_context(
    domain_names: tuple[str, ...],
    region: str = TEST_REGION,
) -> dict[str, object]:
    """Pre-seed CDK lookup results so synthesis never calls AWS."""
    context: dict[str, object] = {
        f"availability-zones:account={TEST_ACCOUNT}:region={region}": [
            f"{region}a",
            f"{region}b",
            f"{region}c",
        ],
    }
    for domain_name in domain_names:
        key = f"hosted-zone:account={TEST_ACCOUNT}:domainName={domain_name}:region={region}"
        context[key] = {
            "Id": f"/hostedzone/{TEST_HOSTED_ZONE_ID}",
            "Name": f"{domain_name}.",
        }
    return context


@pytest.fixture
def make_app():
    """Create a fresh CDK App with lookup context for the given domains."""

    def _make_app(
        *domain_names: str,
        region: str = TEST_REGION,
        **context: object,
    ) -> App:
        domains = domain_names or ("example.com", "nikolatec.com")
        return App(context={**lookup_context(domains, region), **context})

    return _make_app


@pytest.fixture
def cdk_app(make_app):
    """Create a fresh CDK App instance for each test."""
    return make_app()


@pytest.fixture(scope="session")
def aws_environment():
    """Provide AWS environment configuration for testing."""
    return Environment(account=TEST_ACCOUNT, region=TEST_REGION)


@pytest.fixture
def build_context(tmp_path):
    """Directory standing in for the backend API container build context."""
    context_dir = tmp_path / "backend-api"
    context_dir.mkdir()
    (context_dir / "Dockerfile").write_text(
        "FROM node:20-alpine\nWORKDIR /app\nCOPY . .\nEXPOSE 3000\nCMD [\"node\", \"dist/main.js\"]\n",
    )
    return context_dir


@pytest.fixture
def backend_config(build_context):
    """Configuration for the example.com / svc deployment."""
    return BackendApiConfig(
        domain_name="example.com",
        project_name="svc",
        container_build_context=str(build_context),
    )


@pytest.fixture
def backend_stack(cdk_app, aws_environment, backend_config):
    return BackendApiStack(
        cdk_app,
        "TestBackendApiStack",
        config=backend_config,
        env=aws_environment,
    )


@pytest.fixture
def template(backend_stack):
    return Template.from_stack(backend_stack)
