"""
Configuration Module

Provides fleet configuration types and loading utilities.
"""

from .types import (
    NodeKind,
    NodeStage,
    LOCATIONS,
    resolve_region,
    IcecastCredentials,
    NodeSpec,
    NodeRuntimeState,
    FleetNode,
    FleetConfig,
)

from .loader import ConfigLoader, StateManager

__all__ = [
    # Enums
    "NodeKind",
    "NodeStage",
    # Region table
    "LOCATIONS",
    "resolve_region",
    # Config types
    "IcecastCredentials",
    "NodeSpec",
    # Runtime types
    "NodeRuntimeState",
    "FleetNode",
    "FleetConfig",
    # Utilities
    "ConfigLoader",
    "StateManager",
]
