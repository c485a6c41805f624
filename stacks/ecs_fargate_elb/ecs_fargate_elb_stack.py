"""
stacks/ecs_fargate_elb/ecs_fargate_elb_stack.py

Main CDK Stack for the Java distro integration tests on ECS Fargate.
All configuration values are supplied by infra/config (environment-backed).
"""

from pathlib import Path
from typing import Dict, Optional

from aws_cdk import (
    Stack,
    CfnOutput,
    RemovalPolicy,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_logs as logs,
    aws_secretsmanager as secretsmanager,
)
from constructs import Construct

from infra.config.settings import DeploymentConfig
from stacks.ecs_fargate_elb.artifact import default_container_context, stage_agent_artifact
from stacks.ecs_fargate_elb.constructs.springboot_service import SpringBootService

VPC_CIDR = "10.0.0.0/16"
MAX_AZS = 3
NAT_GATEWAYS = 1
SUBNET_CIDR_MASK = 24

VPC_BASE_NAME = "JavaagentFargateTestVpc"
CLUSTER_BASE_NAME = "JavaagentFargateTestCluster"
LOG_GROUP_BASE_NAME = "JavaagentFargateTestLogGroup"


class EcsFargateElbStack(Stack):
    """
    Top-level CDK stack.

    Creates:
      - VPC with one private (egress) and one public subnet group
      - ECS cluster and CloudWatch log group
      - SpringBootService construct (Fargate task + ALB + health check)
      - CloudFormation Outputs for the load balancer and greeting URL

    ``tags`` are applied to every resource, with ``lumigo:suffix`` added when
    a deployment suffix is set.

    The agent jar is staged into the container build context before the
    stack is attached to ``scope``; a missing jar raises
    AgentArtifactNotFoundError and leaves the app without this stack.
    """

    def __init__(
        self,
        scope: Construct,
        stack_id: str,
        *,
        config: DeploymentConfig,
        container_context: Optional[Path] = None,
        tags: Optional[Dict[str, str]] = None,
        **kwargs,
    ):
        container_context = container_context or default_container_context()
        stage_agent_artifact(config.agent_artifact_path, container_context)

        super().__init__(scope, stack_id, tags=config.tags(tags), **kwargs)
        self.config = config

        # ── Tracer token from Secrets Manager ─────────────────────────────────
        tracer_token = ecs.Secret.from_secrets_manager(
            secretsmanager.Secret.from_secret_name_v2(self, "Secret", config.secret_name),
            config.secret_key,
        )

        # ── Network ───────────────────────────────────────────────────────────
        self.vpc = ec2.Vpc(
            self,
            "Vpc",
            vpc_name=config.suffixed(VPC_BASE_NAME),
            ip_addresses=ec2.IpAddresses.cidr(VPC_CIDR),
            max_azs=MAX_AZS,
            nat_gateways=NAT_GATEWAYS,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="private-subnet",
                    subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS,
                    cidr_mask=SUBNET_CIDR_MASK,
                ),
                ec2.SubnetConfiguration(
                    name="public-subnet",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=SUBNET_CIDR_MASK,
                ),
            ],
        )

        # ── Cluster + logs ────────────────────────────────────────────────────
        self.cluster = ecs.Cluster(
            self,
            "Cluster",
            cluster_name=config.suffixed(CLUSTER_BASE_NAME),
            vpc=self.vpc,
        )

        self.log_group = logs.LogGroup(
            self,
            "LogGroup",
            log_group_name=config.suffixed(LOG_GROUP_BASE_NAME),
            removal_policy=RemovalPolicy.DESTROY,
        )

        # ── Test server ───────────────────────────────────────────────────────
        self.server = SpringBootService(
            self,
            "Server",
            cluster=self.cluster,
            container_context=container_context,
            log_group=self.log_group,
            server_port=config.server_port,
            environment={
                "AWS_REGION": config.container_region,
                "SERVER_PORT": str(config.server_port),
                "LUMIGO_DEBUG_SPANDUMP": config.debug_spandump,
            },
            secrets={
                "LUMIGO_TRACER_TOKEN": tracer_token,
            },
            health_check=config.health_check,
        )

        # ── Outputs ───────────────────────────────────────────────────────────
        CfnOutput(
            self,
            "LoadBalancerDNS",
            value=self.server.load_balancer_dns,
            description="DNS name of the test server load balancer",
            export_name=f"{stack_id}-LoadBalancerDNS",
        )

        CfnOutput(
            self,
            "GreetingURL",
            value=self.server.greeting_url,
            description="Health check endpoint of the instrumented test server",
            export_name=f"{stack_id}-GreetingURL",
        )

        CfnOutput(
            self,
            "ClusterName",
            value=self.cluster.cluster_name,
            description="ECS cluster running the test server",
            export_name=f"{stack_id}-ClusterName",
        )

        CfnOutput(
            self,
            "LogGroupName",
            value=self.log_group.log_group_name,
            description="CloudWatch log group of the test server (span dumps land here)",
            export_name=f"{stack_id}-LogGroupName",
        )
