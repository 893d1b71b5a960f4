"""
Readiness Polling

Waits for provisioned instances to receive a public address. Every node is
polled by its own worker; one node timing out never affects the others.
"""

import time
from typing import Callable, Sequence

from loguru import logger

from ..cloud import CloudProviderFactory
from ..configs import FleetNode, NodeStage
from ..errors import FleetError, ReadinessTimeout
from ..fanout import FleetReport, fan_out

POLL_INTERVAL_SECONDS = 5.0
READY_TIMEOUT_SECONDS = 120.0


class ReadinessWaiter:
    """Polls the provider until each node has an address or its deadline passes"""

    def __init__(
        self,
        providers: CloudProviderFactory,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        timeout_seconds: float = READY_TIMEOUT_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.providers = providers
        self.poll_interval = poll_interval
        self.timeout_seconds = timeout_seconds
        self._sleep = sleep
        self._clock = clock

    def wait_node(self, node: FleetNode) -> None:
        """
        Block until node has a public address.

        The deadline bounds the polling loop only; a describe call that is
        already in flight is not interrupted.

        Raises:
            ReadinessTimeout: no address within timeout_seconds
            CloudProviderError: describe failed; not retried
        """
        if not node.state.instance_id:
            raise FleetError(f"{node.name} has no instance to wait for")

        cloud = self.providers.get_provider(node.spec.region)
        deadline = self._clock() + self.timeout_seconds
        while self._clock() < deadline:
            description = cloud.describe_instance(node.state.instance_id)
            if description.dns_name:
                node.state.dns_name = description.dns_name
                node.state.private_dns_name = description.private_dns_name or None
                node.state.stage = NodeStage.READY
                return
            logger.debug(f"{node.state.instance_id} has no address yet ({description.state})")
            self._sleep(self.poll_interval)

        raise ReadinessTimeout(node.name, self.timeout_seconds)

    def wait_all(self, nodes: Sequence[FleetNode]) -> FleetReport:
        """Wait on every node concurrently and report each outcome"""
        logger.info(f"Waiting for {len(nodes)} instances to get an address...")

        def wait_and_log(node: FleetNode) -> None:
            try:
                self.wait_node(node)
            except ReadinessTimeout as e:
                logger.warning(f"{node}: {e}")
                raise
            except Exception as e:
                logger.error(f"{node}: {e}")
                raise
            logger.success(f"{node}: ready")

        report = fan_out(nodes, wait_and_log, stage="ready")
        logger.info(f"{len(report.succeeded)}/{len(nodes)} instances ready")
        return report
