"""
Relationship client wiring and lifecycle
"""
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import logging

import httpx

from .config import settings
from .domain.models import Actor
from .application.broadcaster import RelationshipBroadcaster
from .application.coordinator import MutationCoordinator
from .application.notifier import INotifier, LoggingNotifier
from .application.services import RelationshipService
from .infrastructure.cache import RelationshipListCache
from .infrastructure.service_client import RelationshipServiceClient

logger = logging.getLogger(__name__)


def configure_logging():
    """Configure logging"""
    logging.basicConfig(
        level=logging.INFO if not settings.DEBUG else logging.DEBUG,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(
    viewer_id: Actor,
    token: Optional[str] = None,
    notifier: Optional[INotifier] = None,
    base_url: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[RelationshipService]:
    """
    Relationship client lifespan manager

    Args:
        viewer_id: Signed-in user
        token: Bearer token for the API
        notifier: Where user notices go (defaults to the log)
        base_url: API base URL override
        transport: httpx transport override

    Yields:
        RelationshipService wired to the remote API and list cache
    """
    # Startup
    configure_logging()
    logger.info(f"Starting {settings.APP_NAME} for viewer {viewer_id}...")

    client = RelationshipServiceClient(base_url=base_url, token=token, transport=transport)
    await client.start()

    cache = RelationshipListCache()
    await cache.connect()

    broadcaster = RelationshipBroadcaster()
    coordinator = MutationCoordinator(
        broadcaster,
        client,
        notifier or LoggingNotifier(),
        list_invalidator=cache,
    )
    service = RelationshipService(viewer_id, client, broadcaster, coordinator, cache)

    try:
        yield service
    finally:
        # Shutdown
        logger.info(f"Shutting down {settings.APP_NAME}...")
        await coordinator.drain()
        await cache.disconnect()
        await client.stop()
        logger.info(f"{settings.APP_NAME} shut down successfully")
