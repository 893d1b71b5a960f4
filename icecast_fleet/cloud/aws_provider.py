"""
AWS Cloud Provider Implementation

Implements CloudProviderBase for EC2 using boto3. Credentials come from
boto3's default chain (environment, shared config, instance profile).
"""

from typing import Any, Dict, List, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import CloudProviderError
from .base import CloudProviderBase, InstanceDescription


def _describe(instance: Dict[str, Any]) -> InstanceDescription:
    return InstanceDescription(
        instance_id=instance["InstanceId"],
        dns_name=instance.get("PublicDnsName") or "",
        private_dns_name=instance.get("PrivateDnsName") or "",
        state=instance.get("State", {}).get("Name"),
    )


class AWSProvider(CloudProviderBase):
    """EC2 instance operations for a single region"""

    def __init__(self, region_id: str, profile_name: Optional[str] = None):
        super().__init__(region_id)
        self.profile_name = profile_name
        self._ec2_client: Any = None

    def initialize_client(self) -> None:
        """Initialize boto3 EC2 client"""
        session = boto3.Session(profile_name=self.profile_name, region_name=self.region_id)
        self._ec2_client = session.client('ec2')

    @property
    def ec2_client(self):
        if self._ec2_client is None:
            self.initialize_client()
        return self._ec2_client

    def create_instance(
        self,
        image_id: str,
        instance_type: str,
        key_name: Optional[str] = None,
    ) -> List[InstanceDescription]:
        """Launch one EC2 instance"""
        launch_params: Dict[str, Any] = {
            "ImageId": image_id,
            "InstanceType": instance_type,
            "MinCount": 1,
            "MaxCount": 1,
        }
        if key_name:
            launch_params["KeyName"] = key_name

        try:
            response = self.ec2_client.run_instances(**launch_params)
        except (ClientError, BotoCoreError) as e:
            raise CloudProviderError(f"Failed to run instance in {self.region_id}: {e}") from e

        return [_describe(i) for i in response.get("Instances", [])]

    def describe_instance(self, instance_id: str) -> InstanceDescription:
        """Describe one EC2 instance"""
        try:
            response = self.ec2_client.describe_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise CloudProviderError(f"Failed to describe instance {instance_id}: {e}") from e

        reservations = response.get("Reservations", [])
        if len(reservations) != 1:
            raise CloudProviderError(f"describe {instance_id}: want 1 reservation, got {len(reservations)}")
        instances = reservations[0].get("Instances", [])
        if len(instances) != 1:
            raise CloudProviderError(f"describe {instance_id}: want 1 instance, got {len(instances)}")
        return _describe(instances[0])

    def terminate_instance(self, instance_id: str) -> None:
        """Terminate one EC2 instance"""
        try:
            self.ec2_client.terminate_instances(InstanceIds=[instance_id])
        except (ClientError, BotoCoreError) as e:
            raise CloudProviderError(f"Failed to terminate instance {instance_id}: {e}") from e
