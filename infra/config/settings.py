"""
infra/config/settings.py

Deployment configuration for the ECS Fargate integration-test stack.
All defaulting happens here, once, so the stack only ever sees resolved values.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# ─── Defaults ─────────────────────────────────────────────────────────────────
STACK_BASE_NAME = "lumigo-java-distro-itests"
UNKNOWN_REGION = "unknown_region"

DEFAULT_SECRET_NAME = "AccessKeys"
DEFAULT_SECRET_KEY = "LumigoToken"

DEFAULT_HEALTH_CHECK_PATH = "/greeting"
DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS = 60
DEFAULT_UNHEALTHY_THRESHOLD = 10
DEFAULT_DEBUG_SPANDUMP = "/dev/stdout"

SERVER_PORT = 8080

# ─── Environment variable names ───────────────────────────────────────────────
ENV_ACCOUNT = "CDK_DEFAULT_ACCOUNT"
ENV_REGION = "CDK_DEFAULT_REGION"
ENV_SUFFIX = "DEPLOYMENT_SUFFIX"
ENV_AGENT_JAR = "AGENT_JAR_PATH"
ENV_HEALTH_CHECK_INTERVAL = "HEALTH_CHECK_INTERVAL_SECONDS"
ENV_UNHEALTHY_THRESHOLD = "HEALTH_CHECK_UNHEALTHY_THRESHOLD"
ENV_DEBUG_SPANDUMP = "LUMIGO_DEBUG_SPANDUMP"


def normalize_suffix(suffix: Optional[str]) -> str:
    """Strip whitespace and surrounding separators; ``None`` and blanks become ``""``."""
    if not suffix:
        return ""
    return suffix.strip().strip("-")


def int_from_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s=%r is not an integer, using default %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s=%r must be positive, using default %d", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class HealthCheckSettings:
    """Target group health check parameters.

    Attributes:
        path: HTTP path probed on the test server.
        interval_seconds: Seconds between probes.
        unhealthy_threshold: Consecutive failures before a target is unhealthy.
    """

    path: str = DEFAULT_HEALTH_CHECK_PATH
    interval_seconds: int = DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS
    unhealthy_threshold: int = DEFAULT_UNHEALTHY_THRESHOLD


@dataclass(frozen=True)
class DeploymentConfig:
    """Resolved inputs of the integration-test stack.

    Attributes:
        account: Target AWS account, or None to leave the stack environment-agnostic.
        region: Target AWS region, or None.
        deployment_suffix: Qualifier appended to physical names, "" when unset.
        secret_name: Secrets Manager secret holding the tracer token.
        secret_key: JSON key of the token inside that secret.
        agent_artifact_path: Explicit agent jar location, None for the default layout.
        health_check: Target group health check settings.
        debug_spandump: Value of LUMIGO_DEBUG_SPANDUMP in the container.
        server_port: Container port, also used as listener and health check port.
    """

    account: Optional[str] = None
    region: Optional[str] = None
    deployment_suffix: str = ""
    secret_name: str = DEFAULT_SECRET_NAME
    secret_key: str = DEFAULT_SECRET_KEY
    agent_artifact_path: Optional[Path] = None
    health_check: HealthCheckSettings = field(default_factory=HealthCheckSettings)
    debug_spandump: str = DEFAULT_DEBUG_SPANDUMP
    server_port: int = SERVER_PORT

    def __post_init__(self):
        object.__setattr__(self, "deployment_suffix", normalize_suffix(self.deployment_suffix))
        object.__setattr__(self, "account", self.account or None)
        object.__setattr__(self, "region", self.region or None)

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> "DeploymentConfig":
        """Build a config from process environment variables, defaulting anything missing."""
        jar_path = environ.get(ENV_AGENT_JAR)
        return cls(
            account=environ.get(ENV_ACCOUNT),
            region=environ.get(ENV_REGION),
            deployment_suffix=environ.get(ENV_SUFFIX, ""),
            agent_artifact_path=Path(jar_path) if jar_path else None,
            health_check=HealthCheckSettings(
                interval_seconds=int_from_env(
                    environ, ENV_HEALTH_CHECK_INTERVAL, DEFAULT_HEALTH_CHECK_INTERVAL_SECONDS
                ),
                unhealthy_threshold=int_from_env(
                    environ, ENV_UNHEALTHY_THRESHOLD, DEFAULT_UNHEALTHY_THRESHOLD
                ),
            ),
            debug_spandump=environ.get(ENV_DEBUG_SPANDUMP) or DEFAULT_DEBUG_SPANDUMP,
        )

    @property
    def container_region(self) -> str:
        return self.region or UNKNOWN_REGION

    def suffixed(self, base: str) -> str:
        """Return ``base-suffix``, or ``base`` unchanged when no suffix is set."""
        if not self.deployment_suffix:
            return base
        return f"{base}-{self.deployment_suffix}"

    @property
    def stack_name(self) -> str:
        return self.suffixed(STACK_BASE_NAME)

    def tags(self, base_tags: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        tags = dict(base_tags or {})
        if self.deployment_suffix:
            tags["lumigo:suffix"] = self.deployment_suffix
        return tags
