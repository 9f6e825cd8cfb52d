"""
Streams Layer

Pull-based readables: the backpressure buffer, the collection updater that
feeds it, and the overflow stash.
"""

from .readable import Readable, DEFAULT_HIGH_WATER_MARK
from .collection_updater import CollectionUpdater, UpdaterState
from .stash import OverflowStash, DEFAULT_RELEASE_INTERVAL

__all__ = [
    'Readable',
    'DEFAULT_HIGH_WATER_MARK',
    'CollectionUpdater',
    'UpdaterState',
    'OverflowStash',
    'DEFAULT_RELEASE_INTERVAL',
]
