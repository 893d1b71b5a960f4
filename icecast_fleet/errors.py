"""
Fleet Error Types

Every failure the orchestrator reports derives from FleetError so the CLI
can log it and exit non-zero after persisting state.
"""

from typing import Dict, Optional


class FleetError(Exception):
    """Base class for fleet lifecycle failures"""


class CloudProviderError(FleetError):
    """The provider API rejected a request or returned an unexpected shape"""


class ProvisionError(FleetError):
    """Instance creation failed; provisioning stopped at this node"""

    def __init__(self, index: int, node_name: str, reason: str):
        super().__init__(f"provisioning node #{index} ({node_name}) failed: {reason}")
        self.index = index
        self.node_name = node_name
        self.reason = reason


class ReadinessTimeout(FleetError):
    """A node got no network address before the readiness deadline"""

    def __init__(self, node_name: str, timeout_seconds: float):
        super().__init__(f"{node_name}: server took too long (no address after {timeout_seconds:g}s)")
        self.node_name = node_name
        self.timeout_seconds = timeout_seconds


class RemoteCommandError(FleetError):
    """A remote command failed; output holds the combined stdout/stderr"""

    def __init__(self, host: str, command: str, output: str = "", return_code: Optional[int] = None):
        super().__init__(f"{host}: {command!r} failed (exit {return_code})")
        self.host = host
        self.command = command
        self.output = output
        self.return_code = return_code


class MissingMasterError(FleetError):
    """No node with kind 'master' exists in the fleet"""

    def __init__(self):
        super().__init__("no master found in config")


class _AggregateError(FleetError):
    summary = "some nodes failed"

    def __init__(self, failures: Dict[str, BaseException]):
        names = ", ".join(failures)
        super().__init__(f"{self.summary}: {names}")
        self.failures = failures


class ConfigurationError(_AggregateError):
    summary = "some instances didn't set up cleanly"


class ShutdownError(_AggregateError):
    summary = "some instances didn't shut down cleanly"
