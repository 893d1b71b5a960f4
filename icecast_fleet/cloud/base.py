"""
Cloud Provider Abstract Base Class

Defines the three instance operations the fleet orchestrator needs.
This keeps cloud-specific logic separate from fleet logic.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class InstanceDescription:
    """What the provider reports about one instance"""
    instance_id: str
    # Public DNS name; empty while the instance is still pending
    dns_name: str = ""
    private_dns_name: str = ""
    state: Optional[str] = None


class CloudProviderBase(ABC):
    """
    Abstract base class for a provider bound to one region.

    Every call blocks the calling thread until the provider answers.
    Failures are raised as CloudProviderError.
    """

    def __init__(self, region_id: str):
        self.region_id = region_id

    @abstractmethod
    def create_instance(
        self,
        image_id: str,
        instance_type: str,
        key_name: Optional[str] = None,
    ) -> List[InstanceDescription]:
        """
        Request one instance.

        Args:
            image_id: ID of the image to boot
            instance_type: Instance type (e.g., t1.micro)
            key_name: SSH key pair name

        Returns:
            Descriptions of the instances the provider created. Callers
            treat anything other than exactly one as a failure.
        """

    @abstractmethod
    def describe_instance(self, instance_id: str) -> InstanceDescription:
        """
        Get the current description of an instance.

        Args:
            instance_id: Instance ID to describe

        Returns:
            InstanceDescription; dns_name may be empty
        """

    @abstractmethod
    def terminate_instance(self, instance_id: str) -> None:
        """
        Terminate an instance.

        Args:
            instance_id: Instance ID to terminate
        """
