"""Global pytest configuration and fixtures for CDK testing."""

import os
import sys
from dataclasses import replace
from pathlib import Path

import pytest
from aws_cdk import App, Environment
from aws_cdk.assertions import Template

# Add the project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from infra.config.settings import DeploymentConfig  # noqa: E402
from stacks.ecs_fargate_elb.ecs_fargate_elb_stack import EcsFargateElbStack  # noqa: E402

TEST_ACCOUNT = "123456789012"
TEST_REGION = "us-east-1"


@pytest.fixture(scope="session", autouse=True)
def configure_test_environment():
    """Configure environment variables for consistent testing."""
    test_env = {
        "AWS_DEFAULT_REGION": TEST_REGION,
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


@pytest.fixture
def agent_jar(tmp_path):
    """A stand-in for the built agent jar."""
    jar = tmp_path / "agent" / "build" / "libs" / "agent-dev-SNAPSHOT-all.jar"
    jar.parent.mkdir(parents=True)
    jar.write_bytes(b"PK\x03\x04 fake agent jar")
    return jar


@pytest.fixture
def container_context(tmp_path):
    """An empty container build context holding only a Dockerfile."""
    context = tmp_path / "containers" / "server"
    context.mkdir(parents=True)
    (context / "Dockerfile").write_text(
        "FROM scratch\nCOPY distro/lumigo-opentelemetry-distro.jar /opt/\n"
    )
    return context


@pytest.fixture
def build_stack(agent_jar, container_context):
    """Factory building the stack in a fresh App from DeploymentConfig overrides."""

    def _build(tags=None, **overrides) -> EcsFargateElbStack:
        overrides.setdefault("account", TEST_ACCOUNT)
        overrides.setdefault("region", TEST_REGION)
        config = replace(DeploymentConfig(agent_artifact_path=agent_jar), **overrides)
        env = None
        if config.account or config.region:
            env = Environment(account=config.account, region=config.region)
        return EcsFargateElbStack(
            App(),
            config.stack_name,
            config=config,
            container_context=container_context,
            tags=tags,
            env=env,
        )

    return _build


@pytest.fixture
def synth(build_stack):
    """Factory returning the synthesized Template for DeploymentConfig overrides."""

    def _synth(tags=None, **overrides) -> Template:
        return Template.from_stack(build_stack(tags=tags, **overrides))

    return _synth
