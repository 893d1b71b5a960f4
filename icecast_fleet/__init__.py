"""
icecast-fleet

Provisions, configures and tears down a small fleet of Icecast streaming
relays on AWS EC2, and writes playlists that spread listeners across them.

Features:
- One master (origin) and any number of relays, each in its own region
- Sequential provisioning with automatic rollback on failure
- Concurrent readiness polling and configuration rollout
- State persisted after every command, so runs can be resumed or torn down
- m3u and pls playlists per mount and relay

Usage:
    from icecast_fleet import ConfigLoader, FleetManager

    config = ConfigLoader.load_from_file("config.json")
    manager = FleetManager(config)
    manager.run()
    manager.setup()

CLI:
    icecast-fleet run config.json
    icecast-fleet setup
    icecast-fleet playlist live
    icecast-fleet shutdown
"""

__version__ = "0.1.0"

# Core types
from .configs import (
    NodeKind,
    NodeStage,
    LOCATIONS,
    IcecastCredentials,
    NodeSpec,
    NodeRuntimeState,
    FleetNode,
    FleetConfig,
)

# Errors
from .errors import (
    FleetError,
    CloudProviderError,
    ProvisionError,
    ReadinessTimeout,
    RemoteCommandError,
    MissingMasterError,
    ConfigurationError,
    ShutdownError,
)

# Main orchestrator
from .main import FleetManager

# Cloud providers
from .cloud import (
    CloudProviderBase,
    InstanceDescription,
    AWSProvider,
    CloudProviderFactory,
)

# Stages
from .server_deployment import Provisioner, ReadinessWaiter
from .node_setup import ConfigRollout
from .resource_cleanup import ShutdownManager
from .playlist import PlaylistGenerator

# Configuration utilities
from .configs.loader import ConfigLoader, StateManager

__all__ = [
    # Version
    "__version__",
    # Types
    "NodeKind",
    "NodeStage",
    "LOCATIONS",
    "IcecastCredentials",
    "NodeSpec",
    "NodeRuntimeState",
    "FleetNode",
    "FleetConfig",
    # Errors
    "FleetError",
    "CloudProviderError",
    "ProvisionError",
    "ReadinessTimeout",
    "RemoteCommandError",
    "MissingMasterError",
    "ConfigurationError",
    "ShutdownError",
    # Main
    "FleetManager",
    # Cloud
    "CloudProviderBase",
    "InstanceDescription",
    "AWSProvider",
    "CloudProviderFactory",
    # Stages
    "Provisioner",
    "ReadinessWaiter",
    "ConfigRollout",
    "ShutdownManager",
    "PlaylistGenerator",
    # Utils
    "ConfigLoader",
    "StateManager",
]
