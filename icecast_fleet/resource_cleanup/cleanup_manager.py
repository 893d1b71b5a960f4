"""
Resource Cleanup Module

Terminates fleet instances, both for the shutdown command and as the
rollback after a failed provisioning run.

Termination never stops early: every live instance is attempted, so one
stuck instance does not leave the rest running and billing.
"""

from typing import Sequence

from loguru import logger

from ..cloud import CloudProviderFactory
from ..configs import FleetNode, NodeStage
from ..errors import ShutdownError
from ..fanout import FleetReport, NodeResult


class ShutdownManager:
    """Terminates every node that has a live instance"""

    def __init__(self, providers: CloudProviderFactory):
        self.providers = providers

    def terminate_node(self, node: FleetNode) -> None:
        """Terminate one node's instance and mark it terminated"""
        instance_id = node.state.instance_id
        cloud = self.providers.get_provider(node.spec.region)
        cloud.terminate_instance(instance_id)
        node.state.stage = NodeStage.TERMINATED
        logger.info(f"{node}: terminated")

    def terminate_all(self, nodes: Sequence[FleetNode]) -> FleetReport:
        """
        Terminate every live node, in fleet order.

        Nodes without an instance ID, or already terminated, are skipped
        and do not appear in the report.
        """
        results = []
        for node in nodes:
            if not node.state.is_live:
                logger.debug(f"{node.name}: no live instance, skipping")
                continue
            try:
                self.terminate_node(node)
            except Exception as e:
                logger.error(f"{node.state.instance_id} {e}")
                results.append(NodeResult(node_name=node.name, success=False, error=e))
            else:
                results.append(NodeResult(node_name=node.name, success=True))

        report = FleetReport(results)
        logger.info(f"Terminated {len(report.succeeded)}/{len(results)} instances")
        return report

    def shutdown(self, nodes: Sequence[FleetNode]) -> FleetReport:
        """
        terminate_all, then raise if anything is still running.

        Raises:
            ShutdownError: naming every node whose termination failed
        """
        report = self.terminate_all(nodes)
        report.raise_for_failures(ShutdownError)
        return report
