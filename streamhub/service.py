"""
Live Feed Service

Wires clients, the collection updater and the visible content list for
one collection.

DESIGN:
=======
1. Clients are built from config, or injected (tests, shared pools)
2. The updater is the only producer; the content list is the only consumer
3. Closing the service stops polling and releases owned HTTP resources
"""

from __future__ import annotations
from typing import Callable, Optional

import httpx

from .config import StreamHubConfig
from .clients.base import StreamHubClient
from .clients.bootstrap import LivefyreBootstrapClient
from .clients.stream import LivefyreStreamClient
from .content.content_list import ContentList
from .content.types import Content, Entity
from .streams.collection_updater import CollectionUpdater, ContentClient
from .streams.stash import OverflowStash

ContentCallback = Callable[[Entity, Optional[Content]], None]


class LiveFeedService:
    """Follows one collection and maintains its visible content list."""

    def __init__(
        self,
        config: StreamHubConfig,
        bootstrap_client: Optional[ContentClient] = None,
        stream_client: Optional[ContentClient] = None,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        self._config = config
        client_config = config.client
        self._owned_clients = []

        if bootstrap_client is None:
            bootstrap_client = LivefyreBootstrapClient(
                http_client=http_client,
                timeout=client_config.request_timeout,
                user_agent=client_config.user_agent,
                scheme=client_config.scheme,
            )
            self._owned_clients.append(bootstrap_client)
        if stream_client is None:
            stream_client = LivefyreStreamClient(
                http_client=http_client,
                timeout=client_config.long_poll_timeout,
                user_agent=client_config.user_agent,
                scheme=client_config.scheme,
            )
            self._owned_clients.append(stream_client)

        self._updater = CollectionUpdater(
            config.identity,
            bootstrap_client=bootstrap_client,
            stream_client=stream_client,
            high_water_mark=config.high_water_mark,
        )
        self._content_list = ContentList(
            stash=OverflowStash(
                interval=config.stash_release_interval,
                auto_goal=config.stash_auto_goal,
            ),
            max_visible_items=config.max_visible_items,
        )

    @property
    def updater(self) -> CollectionUpdater:
        return self._updater

    @property
    def content_list(self) -> ContentList:
        return self._content_list

    async def run(self, on_content: Optional[ContentCallback] = None) -> None:
        """
        Consume the updater until it fails or is closed.

        ``on_content`` receives every delivered entity and the visible
        content it resolved to (None if it is not visible). Updater errors
        propagate to the caller.
        """
        async for entity in self._updater:
            visible = self._content_list.add(entity)
            if on_content is not None:
                on_content(entity, visible)

    async def aclose(self) -> None:
        self._updater.close()
        for client in self._owned_clients:
            if isinstance(client, StreamHubClient):
                await client.aclose()


def create_service(
    config: StreamHubConfig,
    http_client: Optional[httpx.AsyncClient] = None
) -> LiveFeedService:
    """Create a live feed service with HTTP clients built from config."""
    return LiveFeedService(config, http_client=http_client)
