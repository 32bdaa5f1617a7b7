"""
Bootstrap module for Flowline Core
Provides centralized service initialization and dependency management

This module eliminates duplication between API and CLI initialization by
providing a single entry point to build all core services.
"""
from typing import Dict, Optional
import time
import threading

from config import Config
from .container import ServiceContainer
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Cache containers by mode to avoid reopening storage on every request
_container_cache: Dict[str, ServiceContainer] = {}
# Thread lock for thread-safe cache access and Config.MODE mutation
_container_lock = threading.Lock()


def get_container(mode: Optional[str] = None, *, force: bool = False) -> ServiceContainer:
    """
    Build or retrieve cached ServiceContainer

    Args:
        mode: 'solo' or 'prod' (defaults to Config.MODE)
        force: Force rebuild even if cached (default: False)

    Returns:
        ServiceContainer with storage initialized

    Example:
        container = get_container(mode='solo')
        runner = WorkflowRunner(container.storage, container=container)
    """
    resolved_mode = mode or Config.MODE

    with _container_lock:
        if not force and resolved_mode in _container_cache:
            logger.debug(f"Returning cached container for {resolved_mode}")
            return _container_cache[resolved_mode]

        logger.info(f"Building ServiceContainer for mode={resolved_mode}")

        # Temporarily set Config.MODE so get_storage() picks the matching backend
        original_mode = Config.MODE
        Config.MODE = resolved_mode

        try:
            storage = Config.get_storage()
            logger.debug(f"Storage initialized: {type(storage).__name__}")

            container = ServiceContainer(
                storage=storage,
                mode=resolved_mode,
                initialized_at=time.time()
            )

            _container_cache[resolved_mode] = container
            logger.info(f"ServiceContainer built and cached for {resolved_mode}")

            return container
        finally:
            # Restore original Config.MODE to avoid side effects
            Config.MODE = original_mode


def clear_cache():
    """Clear the container cache (useful for testing or forced rebuilds)"""
    with _container_lock:
        _container_cache.clear()
    logger.debug("Container cache cleared")
