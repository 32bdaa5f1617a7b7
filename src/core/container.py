"""
Service Container
Holds the services a run can reach through its execution state
"""
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..storage.base import StorageInterface


@dataclass
class ServiceContainer:
    """
    Container holding all core services for Flowline Core

    This provides a single source of truth for service instances, shared by
    the API server, the CLI and the nodes that need storage.
    """
    storage: 'StorageInterface'

    # Metadata
    mode: str = "solo"
    initialized_at: Optional[float] = None

    def __post_init__(self):
        """Set initialization timestamp if not provided"""
        if self.initialized_at is None:
            import time
            self.initialized_at = time.time()
