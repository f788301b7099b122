"""
Service Container - Dependency Injection Container

Simple DI container for managing service instances and their dependencies.
Uses lazy loading to only instantiate services when first accessed.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from src.db.store import ProgressStore
from src.utils.datetime_helpers import Clock, now_utc

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Simple dependency injection container for services.

    Services are lazy-loaded on first access via properties.
    Infrastructure dependencies (store, clock) are injected.
    """

    # Infrastructure dependencies (injected)
    store: ProgressStore
    clock: Clock = now_utc
    max_conflict_retries: int = 3

    # Services (lazy-loaded via properties)
    _progress_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def progress_service(self):
        """Get ProgressService instance (lazy-loaded)"""
        if self._progress_service is None:
            from src.services.progress_service import ProgressService
            self._progress_service = ProgressService(
                self.store,
                clock=self.clock,
                max_conflict_retries=self.max_conflict_retries,
            )
            logger.debug("ProgressService instantiated")
        return self._progress_service


# Global container instance (initialized by the API lifespan)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Returns:
        ServiceContainer: The global container instance

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() during application startup before using services."
        )
    return _container


def init_container(
    store: ProgressStore,
    clock: Clock = now_utc,
    max_conflict_retries: int = 3,
) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        store: ProgressStore backing all services
        clock: Source of the current time
        max_conflict_retries: Passed through to ProgressService

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(
        store=store,
        clock=clock,
        max_conflict_retries=max_conflict_retries,
    )

    logger.info(f"Service container initialized with {store.__class__.__name__}")
    return _container


def reset_container() -> None:
    """Drop the global container (used on shutdown and between tests)"""
    global _container
    _container = None
