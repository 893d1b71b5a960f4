"""
Cloud Provider Factory

Creates and caches one provider per region.
"""

import threading
from typing import Dict, Optional

from .base import CloudProviderBase
from .aws_provider import AWSProvider


class CloudProviderFactory:
    """
    Factory for creating cloud provider instances.

    Maintains a cache of provider instances to avoid repeated initialization.
    Workers of the same stage may ask for the same region at once, so the
    cache is guarded by a lock.
    """

    def __init__(self, profile_name: Optional[str] = None):
        self.profile_name = profile_name
        self._providers: Dict[str, CloudProviderBase] = {}
        self._lock = threading.Lock()

    def get_provider(self, region_id: str) -> CloudProviderBase:
        """
        Get or create the provider for a region.

        Args:
            region_id: EC2 region (e.g. us-east-1)

        Returns:
            CloudProviderBase instance
        """
        with self._lock:
            if region_id not in self._providers:
                provider = AWSProvider(region_id, profile_name=self.profile_name)
                provider.initialize_client()
                self._providers[region_id] = provider
            return self._providers[region_id]

    def clear_cache(self) -> None:
        """Clear all cached provider instances"""
        with self._lock:
            self._providers.clear()
