"""
stacks/ecs_fargate_elb/constructs/springboot_service.py

CDK Construct for the instrumented Spring Boot test server behind an ALB.
"""

from pathlib import Path
from typing import Dict

from aws_cdk import (
    Duration,
    aws_ecr_assets as ecr_assets,
    aws_ecs as ecs,
    aws_ecs_patterns as ecs_patterns,
    aws_elasticloadbalancingv2 as elbv2,
    aws_logs as logs,
)
from constructs import Construct

from infra.config.settings import HealthCheckSettings


class SpringBootService(Construct):
    """
    Fargate task running the test server image, fronted by an Application Load Balancer.

    The listener, the container port mapping and the health check all use
    ``server_port``, so the load balancer always routes to the port the server
    listens on.
    """

    def __init__(
        self,
        scope: Construct,
        id: str,
        *,
        cluster: ecs.ICluster,
        container_context: Path,
        log_group: logs.ILogGroup,
        server_port: int,
        environment: Dict[str, str],
        secrets: Dict[str, ecs.Secret],
        health_check: HealthCheckSettings,
        memory_reservation_mib: int = 256,
        desired_count: int = 1,
        log_stream_prefix: str = "springboot",
    ):
        super().__init__(scope, id)

        # ── 1. Task definition + container ───────────────────────────────────
        self.task_definition = ecs.FargateTaskDefinition(self, "TaskDef")
        self.container = self.task_definition.add_container(
            "app",
            image=ecs.ContainerImage.from_asset(
                str(container_context),
                platform=ecr_assets.Platform.LINUX_AMD64,
            ),
            memory_reservation_mib=memory_reservation_mib,
            environment=environment,
            secrets=secrets,
            port_mappings=[
                ecs.PortMapping(
                    container_port=server_port,
                    protocol=ecs.Protocol.TCP,
                )
            ],
            logging=ecs.AwsLogDriver(
                stream_prefix=log_stream_prefix,
                log_group=log_group,
            ),
        )

        # ── 2. Load-balanced service ─────────────────────────────────────────
        self.service = ecs_patterns.ApplicationLoadBalancedFargateService(
            self,
            "SpringBoot",
            cluster=cluster,
            task_definition=self.task_definition,
            desired_count=desired_count,
            target_protocol=elbv2.ApplicationProtocol.HTTP,
            listener_port=server_port,
        )

        # ── 3. Health check on the service's target group ────────────────────
        self.target_group = self.service.target_group
        self.target_group.configure_health_check(
            path=health_check.path,
            interval=Duration.seconds(health_check.interval_seconds),
            unhealthy_threshold_count=health_check.unhealthy_threshold,
            port=str(server_port),
            protocol=elbv2.Protocol.HTTP,
        )

        # Friendly accessors
        self.server_port: int = server_port
        self.load_balancer_dns: str = self.service.load_balancer.load_balancer_dns_name
        self.greeting_url: str = (
            f"http://{self.load_balancer_dns}:{server_port}{health_check.path}"
        )
