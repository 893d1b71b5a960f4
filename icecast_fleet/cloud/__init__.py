"""
Cloud Module

Provides cloud provider abstractions and the EC2 implementation.
"""

from .base import CloudProviderBase, InstanceDescription
from .aws_provider import AWSProvider
from .factory import CloudProviderFactory

__all__ = [
    # Base classes
    "CloudProviderBase",
    "InstanceDescription",
    # Implementations
    "AWSProvider",
    # Factory
    "CloudProviderFactory",
]
