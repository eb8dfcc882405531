"""
Test suite for the backend API compute construct.

Tests cover cluster creation, Container Insights, the container log group,
the Fargate task definition and its single container, the Fargate service
(network configuration, circuit breaker) and target group registration.
"""

from dataclasses import replace

import pytest
from aws_cdk import Stack
from aws_cdk import aws_ec2 as ec2
from aws_cdk.assertions import Match

from stacks.backend_api import Compute


class TestCluster:
    def test_cluster_created(self, template):
        template.resource_count_is("AWS::ECS::Cluster", 1)
        template.has_resource_properties(
            "AWS::ECS::Cluster",
            {"ClusterName": "svc-cluster"},
        )

    def test_container_insights_enhanced(self, template):
        template.has_resource_properties(
            "AWS::ECS::Cluster",
            {
                "ClusterSettings": Match.array_with(
                    [
                        Match.object_like(
                            {"Name": "containerInsights", "Value": "enhanced"},
                        ),
                    ],
                ),
            },
        )


class TestLogGroup:
    def test_container_log_group_retention(self, template):
        template.has_resource_properties(
            "AWS::Logs::LogGroup",
            {"LogGroupName": "/ecs/svc", "RetentionInDays": 30},
        )


class TestTaskDefinition:
    def test_task_definition_properties(self, template):
        template.resource_count_is("AWS::ECS::TaskDefinition", 1)
        template.has_resource_properties(
            "AWS::ECS::TaskDefinition",
            {
                "Cpu": "512",
                "Memory": "1024",
                "Family": "svc-task-def",
                "NetworkMode": "awsvpc",
                "RequiresCompatibilities": ["FARGATE"],
            },
        )

    def test_single_container_with_port_mapping(self, template):
        task_definitions = template.find_resources("AWS::ECS::TaskDefinition")
        properties = next(iter(task_definitions.values()))["Properties"]
        containers = properties["ContainerDefinitions"]

        assert len(containers) == 1
        assert containers[0]["Name"] == "svc-container"
        assert len(containers[0]["PortMappings"]) == 1
        assert containers[0]["PortMappings"][0]["ContainerPort"] == 3000
        assert containers[0]["PortMappings"][0]["HostPort"] == 3000

    def test_container_ships_logs(self, template):
        template.has_resource_properties(
            "AWS::ECS::TaskDefinition",
            {
                "ContainerDefinitions": [
                    Match.object_like(
                        {
                            "LogConfiguration": {
                                "LogDriver": "awslogs",
                                "Options": Match.object_like(
                                    {"awslogs-stream-prefix": "nest-app"},
                                ),
                            },
                        },
                    ),
                ],
            },
        )

    def test_custom_task_size(self, cdk_app, aws_environment, backend_config):
        stack = Stack(cdk_app, "ComputeSizeStack", env=aws_environment)
        vpc = ec2.Vpc(stack, "Vpc", max_azs=2, nat_gateways=0)
        sg = ec2.SecurityGroup(stack, "SG", vpc=vpc)
        config = replace(backend_config, cpu=1024, memory_limit_mib=2048, app_port=8080)

        compute = Compute(stack, "Compute", vpc=vpc, security_group=sg, config=config)

        assert compute.container.container_port == 8080
        assert compute.task_definition.is_fargate_compatible


class TestFargateService:
    def test_service_created(self, template):
        template.resource_count_is("AWS::ECS::Service", 1)
        template.has_resource_properties(
            "AWS::ECS::Service",
            {
                "ServiceName": "svc-service",
                "DesiredCount": 1,
                "LaunchType": "FARGATE",
            },
        )

    def test_service_uses_app_security_group(self, template, backend_stack):
        app_sg_id = backend_stack.get_logical_id(
            backend_stack.security_groups.app_security_group.node.default_child,
        )
        template.has_resource_properties(
            "AWS::ECS::Service",
            {
                "NetworkConfiguration": {
                    "AwsvpcConfiguration": Match.object_like(
                        {
                            "AssignPublicIp": "ENABLED",
                            "SecurityGroups": [{"Fn::GetAtt": [app_sg_id, "GroupId"]}],
                        },
                    ),
                },
            },
        )

    def test_deployment_circuit_breaker(self, template):
        template.has_resource_properties(
            "AWS::ECS::Service",
            {
                "DeploymentConfiguration": Match.object_like(
                    {
                        "DeploymentCircuitBreaker": {"Enable": True, "Rollback": True},
                    },
                ),
            },
        )

    def test_rollout_keeps_running_task(self, template):
        template.has_resource_properties(
            "AWS::ECS::Service",
            {
                "DeploymentConfiguration": Match.object_like(
                    {"MinimumHealthyPercent": 100},
                ),
            },
        )

    def test_service_registered_in_target_group(self, template, backend_stack):
        target_group_id = backend_stack.get_logical_id(
            backend_stack.load_balancer.target_group.node.default_child,
        )
        template.has_resource_properties(
            "AWS::ECS::Service",
            {
                "LoadBalancers": [
                    {
                        "ContainerName": "svc-container",
                        "ContainerPort": 3000,
                        "TargetGroupArn": {"Ref": target_group_id},
                    },
                ],
            },
        )


class TestMissingBuildContext:
    def test_missing_build_context_fails_construction(
        self,
        cdk_app,
        aws_environment,
        backend_config,
        tmp_path,
    ):
        stack = Stack(cdk_app, "MissingContextStack", env=aws_environment)
        vpc = ec2.Vpc(stack, "Vpc", max_azs=2, nat_gateways=0)
        sg = ec2.SecurityGroup(stack, "SG", vpc=vpc)
        config = replace(
            backend_config,
            container_build_context=str(tmp_path / "does-not-exist"),
        )

        with pytest.raises(Exception, match="does-not-exist"):
            Compute(stack, "Compute", vpc=vpc, security_group=sg, config=config)


if __name__ == "__main__":
    pytest.main([__file__, "-v", "--tb=short"])
