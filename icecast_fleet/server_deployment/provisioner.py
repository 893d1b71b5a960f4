"""
Instance Provisioning

Creates one instance per fleet node, strictly in declaration order, so a
node's position still identifies it before any address is known.
"""

from typing import Sequence

from loguru import logger

from ..cloud import CloudProviderFactory
from ..configs import FleetNode, NodeStage
from ..errors import CloudProviderError, ProvisionError


class Provisioner:
    """Sequential instance creation; stops at the first failure"""

    def __init__(self, providers: CloudProviderFactory, key_name: str):
        """
        Args:
            providers: Source of per-region providers
            key_name: SSH key pair name installed on every instance
        """
        self.providers = providers
        self.key_name = key_name

    def provision_node(self, index: int, node: FleetNode) -> None:
        """Create the instance for one node and record its ID"""
        spec = node.spec
        cloud = self.providers.get_provider(spec.region)

        logger.info(f"Launching {spec.size} ({spec.image_id}) for {node.name} in {spec.location}")
        try:
            instances = cloud.create_instance(spec.image_id, spec.size, self.key_name)
        except CloudProviderError as e:
            raise ProvisionError(index, node.name, str(e)) from e

        if len(instances) != 1:
            raise ProvisionError(index, node.name, f"want 1 instance, got {len(instances)}")

        instance = instances[0]
        node.state.instance_id = instance.instance_id
        node.state.stage = NodeStage.PROVISIONED
        logger.info(f"{node}: provisioned")

    def provision(self, nodes: Sequence[FleetNode]) -> None:
        """
        Provision every node in order.

        Raises:
            ProvisionError: on the first failure; later nodes are untouched
                and earlier ones keep their live instances
        """
        for index, node in enumerate(nodes):
            self.provision_node(index, node)
        logger.info(f"Launched {len(nodes)} instances")
