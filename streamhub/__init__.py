"""
StreamHub Live
==============

Streaming update engine for live StreamHub collections: bootstrap once,
long-poll forever, translate states into content, and hand them to the
consumer at the consumer's pace.

Layers (leaves first):
- contracts: identity, errors, typed signals
- clients: Bootstrap and Stream HTTP clients
- content: content entities, state translator, bounded content list
- streams: backpressure buffer, collection updater, overflow stash
"""

from .contracts.base import (
    CollectionIdentity, StreamHubError, BootstrapError, StreamError, ClientError
)
from .streams.collection_updater import CollectionUpdater
from .streams.stash import OverflowStash
from .content.content_list import ContentList
from .config import StreamHubConfig
from .service import LiveFeedService, create_service

__version__ = "0.1.0"

__all__ = [
    'CollectionIdentity',
    'StreamHubError',
    'BootstrapError',
    'StreamError',
    'ClientError',
    'CollectionUpdater',
    'OverflowStash',
    'ContentList',
    'StreamHubConfig',
    'LiveFeedService',
    'create_service',
]
