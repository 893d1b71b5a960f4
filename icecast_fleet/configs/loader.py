"""
Configuration Loader and State Manager

Handles loading and validating the fleet config file, and persisting the
fleet (spec plus runtime state) between invocations.
"""

import json
import os
from typing import Any, Dict, Optional

from .types import FleetConfig, FleetNode, IcecastCredentials, resolve_region


class ConfigLoader:
    """Loads and validates configuration from files"""

    @staticmethod
    def load_from_file(config_path: str) -> FleetConfig:
        """Load fleet configuration from a JSON file"""
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid configuration file {config_path}: {e}")

        return ConfigLoader.from_dict(data)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> FleetConfig:
        """Create FleetConfig from a dictionary"""
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a JSON object, got {type(data).__name__}")

        try:
            icecast = IcecastCredentials.from_dict(data["icecast"])
            servers = [FleetNode.from_dict(s) for s in data.get("servers", [])]
            key_name = data["key_name"]
        except KeyError as e:
            raise ValueError(f"Missing required configuration field: {e}")

        names = [s.name for s in servers]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate server names: {', '.join(duplicates)}")

        for s in servers:
            try:
                resolve_region(s.spec.location)
            except LookupError as e:
                raise ValueError(f"Server {s.name}: {e}")

        masters = [s.name for s in servers if s.spec.is_master]
        if len(masters) > 1:
            raise ValueError(f"Only one master allowed, found {len(masters)}: {', '.join(masters)}")

        return FleetConfig(
            key_name=key_name,
            icecast=icecast,
            servers=servers,
            ssh_key_path=data.get("ssh_key_path"),
        )

    @staticmethod
    def to_dict(config: FleetConfig) -> Dict[str, Any]:
        """Convert FleetConfig to a dictionary"""
        data: Dict[str, Any] = {
            "key_name": config.key_name,
            "icecast": config.icecast.to_dict(),
            "servers": [s.to_dict() for s in config.servers],
        }
        if config.ssh_key_path:
            data["ssh_key_path"] = config.ssh_key_path
        return data


class StateManager:
    """Persists the fleet between invocations; there is no resident process"""

    def __init__(self, state_file_path: str):
        self.state_file_path = state_file_path

    def exists(self) -> bool:
        return os.path.exists(self.state_file_path)

    def load(self) -> Optional[FleetConfig]:
        """Load state from file if it exists"""
        if not self.exists():
            return None

        try:
            with open(self.state_file_path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid state file: {e}")
        return ConfigLoader.from_dict(data)

    def save(self, config: FleetConfig) -> None:
        """Overwrite the state file; it holds passwords, so mode 0600"""
        os.makedirs(os.path.dirname(self.state_file_path) or ".", exist_ok=True)

        fd = os.open(self.state_file_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, 'w') as f:
            json.dump(ConfigLoader.to_dict(config), f, indent=2)
        os.chmod(self.state_file_path, 0o600)
