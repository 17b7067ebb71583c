"""Marketplace: wires the services of one barter marketplace to a store and identity provider.

Invariants:
    - One Repository (and so one mutation lock) shared by every service
    - ProfileService is subscribed to identity changes for the marketplace lifetime
    - close() unsubscribes; it does not dispose the store

Design Decisions:
    - Plain container over a DI framework: FastAPI dependencies pull services
      from the single instance built at startup
"""

import logging
from collections.abc import Callable

from swapsquare.config import Settings
from swapsquare.core.domain_types import Timestamp
from swapsquare.core.repository_protocols import CollectionStore, IdentityProvider
from swapsquare.services.badge_aggregator import BadgeAggregator
from swapsquare.services.conversation_manager import ConversationManager
from swapsquare.services.item_catalog import ItemCatalog
from swapsquare.services.profile_service import ProfileService
from swapsquare.services.repository import Repository, now_ms
from swapsquare.services.swap_engine import SwapEngine

logger = logging.getLogger(__name__)


class Marketplace:
    """Service container for one store + identity provider pair."""

    def __init__(
        self,
        store: CollectionStore,
        identity: IdentityProvider,
        settings: Settings,
        clock: Callable[[], Timestamp] = now_ms,
    ):
        self.repo = Repository(store)
        self.identity = identity
        self.profiles = ProfileService(self.repo, identity, settings.default_city)
        self.catalog = ItemCatalog(
            self.repo,
            max_live_items=settings.max_live_items_per_owner,
            max_images=settings.max_images_per_item,
            max_image_bytes=settings.max_image_bytes,
            default_city=settings.default_city,
            clock=clock,
        )
        self.swaps = SwapEngine(self.repo, clock=clock)
        self.conversations = ConversationManager(self.repo, clock=clock)
        self.badges = BadgeAggregator(self.repo)
        self._unsubscribe = identity.on_auth_change(self.profiles.upsert_from_auth)

    def close(self) -> None:
        self._unsubscribe()
        logger.info("Marketplace closed")
