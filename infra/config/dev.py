"""
infra/config/dev.py

Development environment configuration.
Account, region and deployment suffix come from the process environment
(CDK sets CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION from the active profile).

Optional environment variables:
  DEPLOYMENT_SUFFIX                 → qualifier for parallel deployments (e.g. pr-42)
  AGENT_JAR_PATH                    → agent jar, if not at agent/build/libs/
  HEALTH_CHECK_INTERVAL_SECONDS     → target group probe interval (default 60)
  HEALTH_CHECK_UNHEALTHY_THRESHOLD  → failures before unhealthy (default 10)
  LUMIGO_DEBUG_SPANDUMP             → span dump destination (default /dev/stdout)
"""

import os

from infra.config.settings import DeploymentConfig

# ─── Environment tag ──────────────────────────────────────────────────────────
ENV = "dev"

# ─── Resolved deployment config ───────────────────────────────────────────────
CONFIG = DeploymentConfig.from_environ(os.environ)

# ─── CDK Stack name ───────────────────────────────────────────────────────────
STACK_NAME = CONFIG.stack_name

# ─── Tags applied to all CDK resources ────────────────────────────────────────
TAGS = CONFIG.tags(
    {
        "Environment": ENV,
        "Project": "JavaDistroIntegrationTests",
        "ManagedBy": "CDK",
    }
)
