"""Backend API infrastructure module.

This module provides the VPC, load balancer, certificate, ECS Fargate service
and DNS record that host the backend API container.
"""

from .certificate import DomainTrust
from .compute import Compute
from .config import BackendApiConfig, Reachability, SubnetGroup
from .dns import AliasRecord
from .load_balancer import LoadBalancer
from .network import Network
from .security import SecurityGroups
from .stack import BackendApiStack

__all__ = [
    "AliasRecord",
    "BackendApiConfig",
    "BackendApiStack",
    "Compute",
    "DomainTrust",
    "LoadBalancer",
    "Network",
    "Reachability",
    "SecurityGroups",
    "SubnetGroup",
]
