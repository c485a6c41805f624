#!/usr/bin/env python3
"""
stacks/ecs_fargate_elb/scripts/check_greeting.py

Post-deploy check for the integration-test stack.
Looks up the GreetingURL output of the deployed stack, calls it until the
instrumented Spring Boot server answers "Hi!", then waits for the agent's
span dump (LUMIGO_DEBUG_SPANDUMP=/dev/stdout) to show the traced request in
the stack's CloudWatch log group.

Usage:
    DEPLOYMENT_SUFFIX=pr-42 python3 stacks/ecs_fargate_elb/scripts/check_greeting.py

Environment variables:
    DEPLOYMENT_SUFFIX         - suffix the stack was deployed with (optional)
    AWS_REGION                - AWS region (default: CDK_DEFAULT_REGION, then us-east-1)
    GREETING_TIMEOUT_SECONDS  - how long to wait for a healthy answer (default: 300)
    SPANS_TIMEOUT_SECONDS     - how long to wait for the span dump (default: 120)
"""

import os
import sys
import time

# Add project root to path so infra/ is importable
sys.path.insert(
    0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
)

import boto3
import requests
from botocore.exceptions import ClientError

from infra.config.settings import DeploymentConfig, int_from_env

# ─── Config ───────────────────────────────────────────────────────────────────
REGION          = os.environ.get("AWS_REGION") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")
GREETING_OUTPUT = "GreetingURL"
LOG_GROUP_OUTPUT = "LogGroupName"
EXPECTED_BODY   = "Hi!"
TIMEOUT_SECONDS = int_from_env(os.environ, "GREETING_TIMEOUT_SECONDS", 300)
SPANS_TIMEOUT_SECONDS = int_from_env(os.environ, "SPANS_TIMEOUT_SECONDS", 120)
POLL_SECONDS    = 10

# Spans the agent must emit for one GET /greeting, and the distro resource attribute
EXPECTED_SPANS  = ("GET /greeting", "WebController.greeting")
DISTRO_VERSION_ATTRIBUTE = "lumigo.distro.version"
# ─────────────────────────────────────────────────────────────────────────────


def get_stack_output(stack_name: str, region: str, output_key: str) -> str:
    """Read one output of the deployed stack."""
    cfn = boto3.client("cloudformation", region_name=region)
    try:
        stacks = cfn.describe_stacks(StackName=stack_name)["Stacks"]
    except ClientError as e:
        print(f"❌ Stack '{stack_name}' not found in '{region}': {e.response['Error']['Message']}")
        sys.exit(1)

    for output in stacks[0].get("Outputs", []):
        if output["OutputKey"] == output_key:
            return output["OutputValue"]

    print(f"❌ Stack '{stack_name}' has no '{output_key}' output. Was it deployed from this repo?")
    sys.exit(1)


def get_greeting_url(stack_name: str, region: str) -> str:
    return get_stack_output(stack_name, region, GREETING_OUTPUT)


def greet(url: str) -> bool:
    """One GET /greeting; True when the server answers 200 with the expected body."""
    try:
        resp = requests.get(url, timeout=10)
    except requests.RequestException as e:
        print(f"   ⏳ {url} unreachable: {e}")
        return False

    if resp.status_code != 200:
        print(f"   ⏳ {url} returned HTTP {resp.status_code}")
        return False
    if resp.text.strip() != EXPECTED_BODY:
        print(f"   ⚠️  Unexpected response body: {resp.text!r}")
        return False
    return True


def wait_for_greeting(url: str, timeout: float = TIMEOUT_SECONDS, poll: float = POLL_SECONDS) -> bool:
    deadline = time.monotonic() + timeout
    while True:
        if greet(url):
            return True
        if time.monotonic() >= deadline:
            return False
        time.sleep(poll)


def find_spans(logs_client, log_group: str, start_time_ms: int) -> set:
    """Names from EXPECTED_SPANS seen in span dumps that carry the distro version attribute."""
    found = set()
    kwargs = {
        "logGroupName": log_group,
        "startTime": start_time_ms,
        "filterPattern": f'"{DISTRO_VERSION_ATTRIBUTE}"',
    }
    while True:
        resp = logs_client.filter_log_events(**kwargs)
        for event in resp.get("events", []):
            message = event.get("message", "")
            if DISTRO_VERSION_ATTRIBUTE not in message:
                continue
            found.update(name for name in EXPECTED_SPANS if name in message)
        token = resp.get("nextToken")
        if not token:
            return found
        kwargs["nextToken"] = token


def wait_for_spans(
    log_group: str,
    region: str,
    start_time_ms: int,
    timeout: float = SPANS_TIMEOUT_SECONDS,
    poll: float = POLL_SECONDS,
) -> bool:
    logs_client = boto3.client("logs", region_name=region)
    deadline = time.monotonic() + timeout
    while True:
        missing = set(EXPECTED_SPANS) - find_spans(logs_client, log_group, start_time_ms)
        if not missing:
            return True
        print(f"   ⏳ waiting for spans: {', '.join(sorted(missing))}")
        if time.monotonic() >= deadline:
            return False
        time.sleep(poll)


if __name__ == "__main__":
    config = DeploymentConfig.from_environ(os.environ)
    started_ms = int(time.time() * 1000)

    print("=" * 70)
    print(f"CHECK: GET /greeting on {config.stack_name}")
    print("=" * 70)

    url = get_greeting_url(config.stack_name, REGION)
    print(f"Greeting URL : {url}")

    if not wait_for_greeting(url):
        print(f"\n❌ No healthy greeting within {TIMEOUT_SECONDS}s")
        sys.exit(1)
    print("✅ Server answered")

    log_group = get_stack_output(config.stack_name, REGION, LOG_GROUP_OUTPUT)
    print(f"\nSpan dumps   : {log_group}")

    if not wait_for_spans(log_group, REGION, started_ms):
        print(f"\n❌ No traced greeting in the span dump within {SPANS_TIMEOUT_SECONDS}s")
        sys.exit(1)

    print("\n✅ Agent traced the request: spans and distro version found")
