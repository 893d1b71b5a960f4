"""
Main Orchestrator Module

FleetManager ties the stages together, one method per command:

- run:      provision every node in order, then wait for addresses
- setup:    push the Icecast configuration to every node
- playlist: write listener playlists
- shutdown: terminate every live instance

A failed provisioning run terminates whatever it already created.
"""

from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from .cloud import CloudProviderFactory
from .configs import FleetConfig, NodeRuntimeState, NodeStage
from .errors import ProvisionError
from .fanout import FleetReport, rollback_on_failure
from .node_setup import ConfigRollout
from .playlist import PlaylistGenerator
from .resource_cleanup import ShutdownManager
from .server_deployment import Provisioner, ReadinessWaiter
from .utils.remote import RemoteExecutor


class FleetManager:
    """
    Lifecycle orchestrator for an Icecast relay fleet.

    The manager owns the FleetConfig; stages receive its nodes and write
    back into their runtime state. Persisting the result is the caller's
    job (see cli.py), so partial progress survives any failure.
    """

    def __init__(
        self,
        config: FleetConfig,
        providers: Optional[CloudProviderFactory] = None,
        executor: Optional[RemoteExecutor] = None,
        waiter: Optional[ReadinessWaiter] = None,
    ):
        """
        Initialize the manager.

        Args:
            config: Fleet configuration and state
            providers: Per-region cloud providers (defaults to EC2)
            executor: SSH transport (defaults to asyncssh with config.ssh_key_path)
            waiter: Readiness waiter (defaults to 5s polls, 120s deadline)
        """
        self.config = config
        self.providers = providers or CloudProviderFactory()
        self.executor = executor or RemoteExecutor(ssh_key_path=config.ssh_key_path)

        self.provisioner = Provisioner(self.providers, config.key_name)
        self.waiter = waiter or ReadinessWaiter(self.providers)
        self.rollout = ConfigRollout(config, self.executor)
        self.cleanup = ShutdownManager(self.providers)

    def run(self) -> FleetReport:
        """
        Provision the fleet and wait for every node to get an address.

        Runtime state already on the nodes is discarded first, so a rollback
        only ever terminates instances this run created.

        Readiness timeouts are logged and reported, not raised.

        Raises:
            ProvisionError: provisioning failed and every instance created
                so far was terminated
            ShutdownError: provisioning failed and the rollback could not
                terminate everything
        """
        servers = self.config.servers
        for node in servers:
            if node.state.is_live:
                logger.warning(f"{node}: discarding recorded instance, run starts from scratch")
            node.state = NodeRuntimeState()

        logger.info(f"Provisioning {len(servers)} servers...")

        rollback_on_failure(
            lambda: self.provisioner.provision(servers),
            self.shutdown,
            ProvisionError,
        )

        provisioned = [n for n in servers if n.state.stage == NodeStage.PROVISIONED]
        return self.waiter.wait_all(provisioned)

    def setup(self) -> FleetReport:
        """
        Configure every node; assumes a successful run.

        Raises:
            MissingMasterError: no master in the fleet; nothing was contacted
            ConfigurationError: at least one node failed; all were attempted
        """
        return self.rollout.rollout_or_raise(self.config.servers)

    def shutdown(self) -> FleetReport:
        """
        Terminate every live instance.

        Raises:
            ShutdownError: at least one termination failed; all were attempted
        """
        logger.info("Shutting down fleet...")
        return self.cleanup.shutdown(self.config.servers)

    def playlist(self, mounts: Sequence[str], output_dir: str = ".") -> List[Path]:
        """Write m3u and pls playlists for each mount"""
        written = PlaylistGenerator(self.config).write(mounts, output_dir)
        for path in written:
            logger.info(f"Wrote {path}")
        return written
