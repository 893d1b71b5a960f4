"""
Server Deployment Module

Handles creation of cloud instances and waiting for them to come up.
"""

from .provisioner import Provisioner
from .readiness import (
    ReadinessWaiter,
    POLL_INTERVAL_SECONDS,
    READY_TIMEOUT_SECONDS,
)

__all__ = [
    "Provisioner",
    "ReadinessWaiter",
    "POLL_INTERVAL_SECONDS",
    "READY_TIMEOUT_SECONDS",
]
