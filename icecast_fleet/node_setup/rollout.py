"""
Configuration Rollout

Renders each node's Icecast setup script and runs it on the node over SSH.
All nodes are configured concurrently; a failed node is reported but never
rolled back or retried.
"""

from typing import Optional, Sequence

from loguru import logger

from ..configs import FleetConfig, FleetNode, NodeStage
from ..errors import ConfigurationError, FleetError, MissingMasterError, RemoteCommandError
from ..fanout import FleetReport, fan_out
from ..utils.remote import RemoteExecutor
from ..utils.templates import TemplateRenderer, get_renderer

SCRIPT_PATH = "setup.sh"


def find_master(nodes: Sequence[FleetNode]) -> FleetNode:
    """Return the master node, or raise MissingMasterError"""
    for node in nodes:
        if node.spec.is_master:
            return node
    raise MissingMasterError()


def render_setup_script(
    config: FleetConfig,
    node: FleetNode,
    master: Optional[FleetNode],
    renderer: Optional[TemplateRenderer] = None,
) -> str:
    """
    Build the setup script for one node.

    Args:
        config: Fleet config holding the Icecast credentials
        node: Node to configure
        master: Master node for relays, None when node is the master
        renderer: Template renderer (defaults to the packaged templates)
    """
    master_address = None
    if master is not None:
        master_address = master.internal_address
        if not master_address:
            raise FleetError(f"master {master.name} has no address")

    return (renderer or get_renderer()).render(
        "setup.sh.j2",
        icecast=config.icecast,
        server=node.spec,
        hostname=node.address or "",
        master_address=master_address,
    )


class ConfigRollout:
    """Delivers and executes the setup script on every node"""

    def __init__(
        self,
        config: FleetConfig,
        executor: RemoteExecutor,
        renderer: Optional[TemplateRenderer] = None,
    ):
        self.config = config
        self.executor = executor
        self.renderer = renderer

    def _ssh(self, node: FleetNode, command: str, input_data: Optional[str] = None) -> None:
        if not node.address:
            raise FleetError(f"{node.name} has no address; run it first")

        result = self.executor.run(node.address, node.spec.username, command, input_data=input_data)
        if not result.success:
            logger.error(f"{node}: {command}\n{result.output}")
            raise RemoteCommandError(node.address, command, result.output, result.return_code)

    def configure_node(self, node: FleetNode, master: FleetNode) -> None:
        """Write setup.sh to the node, then run it"""
        script = render_setup_script(
            self.config,
            node,
            None if node.spec.is_master else master,
            renderer=self.renderer,
        )
        self._ssh(node, f"cat > {SCRIPT_PATH}", input_data=script)
        self._ssh(node, f"bash {SCRIPT_PATH}")
        node.state.stage = NodeStage.CONFIGURED

    def rollout(self, nodes: Sequence[FleetNode]) -> FleetReport:
        """
        Configure every node concurrently.

        Raises:
            MissingMasterError: before any remote command is issued
        """
        master = find_master(nodes)

        def configure_and_log(node: FleetNode) -> None:
            try:
                self.configure_node(node, master)
            except Exception as e:
                logger.error(f"{node}: {e}")
                raise
            logger.success(f"{node}: online")

        logger.info(f"Configuring {len(nodes)} nodes (master: {master.name})")
        report = fan_out(nodes, configure_and_log, stage="setup")
        logger.info(f"{len(report.succeeded)}/{len(nodes)} nodes configured")
        return report

    def rollout_or_raise(self, nodes: Sequence[FleetNode]) -> FleetReport:
        """rollout, then raise ConfigurationError if any node failed"""
        report = self.rollout(nodes)
        report.raise_for_failures(ConfigurationError)
        return report
