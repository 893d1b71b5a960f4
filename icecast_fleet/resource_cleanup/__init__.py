"""
Resource Cleanup Module

Terminates cloud instances to prevent ongoing charges.
"""

from .cleanup_manager import ShutdownManager

__all__ = [
    "ShutdownManager",
]
