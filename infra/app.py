#!/usr/bin/env python3
"""
infra/app.py

CDK application entrypoint.
Reads all config from the process environment (via infra/config/dev.py).

Usage:
    cdk synth
    DEPLOYMENT_SUFFIX=pr-42 cdk deploy lumigo-java-distro-itests-pr-42
"""

import sys
import os
import logging

# Add project root to path so stacks/ is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import aws_cdk as cdk
from infra.config import dev as config
from stacks.ecs_fargate_elb.ecs_fargate_elb_stack import EcsFargateElbStack

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

app = cdk.App()

# ─── Integration-test stack ───────────────────────────────────────────────────
# Raises AgentArtifactNotFoundError (and synth fails) if the agent jar is not built.
EcsFargateElbStack(
    app,
    config.STACK_NAME,
    config=config.CONFIG,
    tags=config.TAGS,
    env=cdk.Environment(
        account=config.CONFIG.account,
        region=config.CONFIG.region,
    ),
)

app.synth()
