"""
stacks/ecs_fargate_elb/artifact.py

Stages the pre-built agent jar into the test server's container build context.

The integration tests live inside the agent repository, so the jar is found
by walking up from this package:

    <agent repo>/agent/build/libs/agent-dev-SNAPSHOT-all.jar
    <agent repo>/<this repo>/stacks/ecs_fargate_elb/artifact.py
"""

import logging
import shutil
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PACKAGE_DIR = Path(__file__).resolve().parent

AGENT_JAR_RELATIVE_PATH = Path("agent", "build", "libs", "agent-dev-SNAPSHOT-all.jar")
STAGED_JAR_RELATIVE_PATH = Path("distro", "lumigo-opentelemetry-distro.jar")

# stacks -> repo root -> agent repo root
AGENT_REPO_ROOT = PACKAGE_DIR.parents[2]


class AgentArtifactNotFoundError(FileNotFoundError):
    """The agent jar has not been built; nothing can be deployed without it."""

    def __init__(self, path: Path):
        super().__init__(f"jar not found at {path}")
        self.path = path


def default_agent_artifact_path() -> Path:
    return AGENT_REPO_ROOT / AGENT_JAR_RELATIVE_PATH


def default_container_context() -> Path:
    return PACKAGE_DIR / "containers" / "server"


def stage_agent_artifact(
    source: Optional[Union[str, Path]] = None,
    context_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Copy the agent jar into ``context_dir`` and return the staged path.

    Raises AgentArtifactNotFoundError before touching the build context if
    the jar does not exist.
    """
    source = Path(source) if source else default_agent_artifact_path()
    context_dir = Path(context_dir) if context_dir else default_container_context()

    if not source.is_file():
        raise AgentArtifactNotFoundError(source)

    destination = context_dir / STAGED_JAR_RELATIVE_PATH
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination)

    logger.info("Staged agent jar %s -> %s", source, destination)
    return destination
