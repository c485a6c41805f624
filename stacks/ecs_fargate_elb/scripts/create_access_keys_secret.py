#!/usr/bin/env python3
"""
stacks/ecs_fargate_elb/scripts/create_access_keys_secret.py

One-time setup script: stores the Lumigo tracer token in the Secrets Manager
secret the ECS task reads (secret "AccessKeys", JSON key "LumigoToken").

Reads the token from an environment variable — no secrets are hardcoded,
and the token is never printed.

Usage:
    export LUMIGO_TRACER_TOKEN="t_xxxxxxxxxxxx"
    python3 stacks/ecs_fargate_elb/scripts/create_access_keys_secret.py

Environment variables:
    LUMIGO_TRACER_TOKEN  - Lumigo tracer token used by the agent under test
    AWS_REGION           - AWS region (default: CDK_DEFAULT_REGION, then us-east-1)
"""

import json
import os
import sys

# Add project root to path so infra/ is importable
sys.path.insert(
    0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))
)

import boto3
from botocore.exceptions import ClientError

from infra.config.settings import DEFAULT_SECRET_KEY, DEFAULT_SECRET_NAME

# ─── Config ───────────────────────────────────────────────────────────────────
REGION = os.environ.get("AWS_REGION") or os.environ.get("CDK_DEFAULT_REGION", "us-east-1")
SECRET_NAME = DEFAULT_SECRET_NAME
SECRET_KEY = DEFAULT_SECRET_KEY
# ─────────────────────────────────────────────────────────────────────────────


def _merged_secret_string(client, token: str) -> str:
    """Keep any other keys already stored in the secret, replace only the token."""
    current = client.get_secret_value(SecretId=SECRET_NAME)
    try:
        values = json.loads(current.get("SecretString") or "{}")
    except json.JSONDecodeError:
        print(f"⚠️  Secret '{SECRET_NAME}' is not JSON — overwriting it")
        values = {}
    if not isinstance(values, dict):
        values = {}
    values[SECRET_KEY] = token
    return json.dumps(values)


def create_or_update_secret(token: str, region: str) -> str:
    """Create the secret, or update its token key when it already exists. Returns the ARN."""
    secrets = boto3.client("secretsmanager", region_name=region)
    print(f"\n🔑 Storing tracer token in secret: {SECRET_NAME} (key: {SECRET_KEY})")

    try:
        resp = secrets.create_secret(
            Name=SECRET_NAME,
            Description="Access keys used by the Java distro integration tests",
            SecretString=json.dumps({SECRET_KEY: token}),
        )
        arn = resp["ARN"]
        print(f"✅ Created!  ARN: {arn}")
        return arn

    except ClientError as e:
        code = e.response["Error"]["Code"]
        msg  = e.response["Error"]["Message"]

        if code == "ResourceExistsException":
            print("⚠️  Secret already exists — updating the token key...")
            resp = secrets.put_secret_value(
                SecretId=SECRET_NAME,
                SecretString=_merged_secret_string(secrets, token),
            )
            arn = resp["ARN"]
            print(f"✅ Updated!  ARN: {arn}")
            return arn

        print(f"❌ Error: {code} — {msg}")
        sys.exit(1)


if __name__ == "__main__":
    token = os.environ.get("LUMIGO_TRACER_TOKEN", "")
    if not token:
        print(
            "❌ LUMIGO_TRACER_TOKEN env var is not set.\n"
            "   In CI this comes from the LUMIGO_TRACER_TOKEN secret."
        )
        sys.exit(1)

    print(f"🌍 Using region: {REGION}")
    create_or_update_secret(token, REGION)

    print("\n✅ Done.")
    print("   Next: cdk deploy")
