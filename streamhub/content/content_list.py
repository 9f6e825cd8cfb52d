"""
Content List

The visible set of a live feed, without any rendering.

BEHAVIOR:
=========
1. One entity per content id: a repeated id mutates the existing entity
2. Entities that stop being public leave the visible set (not destroyed)
3. When bounded and full, the oldest visible entity is displaced into the
   overflow stash and the stash goal is reset to 0
4. Every insertion advances the stash cadence; released entities come back
   through ``add()``
5. Ordered newest first by ``created_at``
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional
import logging

from ..contracts.base import DataAvailable, Signal
from ..streams.readable import Readable
from ..streams.stash import OverflowStash
from .types import Content, Entity, Oembed

LOG = logging.getLogger(__name__)

DEFAULT_MAX_VISIBLE_ITEMS = 50

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def newest_first(content: Content) -> datetime:
    """Default sort key; larger sorts earlier."""
    return content.created_at or _EPOCH


class ContentList:
    """Bounded, id-keyed, ordered list of visible content."""

    def __init__(
        self,
        stash: Optional[OverflowStash] = None,
        max_visible_items: int = DEFAULT_MAX_VISIBLE_ITEMS,
        sort_key: Callable[[Content], datetime] = newest_first
    ):
        if max_visible_items < 1:
            raise ValueError("max_visible_items must be >= 1")
        self._stash = stash if stash is not None else OverflowStash()
        self._max_visible_items = max_visible_items
        self._sort_key = sort_key
        self._bounded = True
        self._contents: List[Content] = []
        self._by_id: Dict[str, Content] = {}
        self._stash.subscribe(self._on_stash_signal)

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def add(self, entity: Entity) -> Optional[Content]:
        """
        Add or update an entity.

        Returns the visible Content it ended up as, or None if nothing
        became visible.
        """
        if isinstance(entity, Oembed):
            return self._attach(entity)

        existing = self._by_id.get(entity.id)
        if existing is not None:
            if existing is not entity:
                existing.update_from(entity)
            if not existing.is_public:
                LOG.debug("content %s is no longer public, removing", existing.id)
                self.remove(existing)
                return None
            return existing

        if not entity.is_public:
            return None

        if self._bounded and not self._has_visible_vacancy():
            displaced = self._contents[-1]
            # Nothing comes back from the stash while we are over capacity
            self._stash.set_goal(0)
            self._stash.stack(displaced)
            self.remove(displaced)

        self._insert(entity)
        self._stash.note_insertion()
        return entity

    def remove(self, content: Content) -> bool:
        """Remove from the visible set. The entity itself is left intact."""
        visible = self._by_id.pop(content.id, None)
        if visible is None:
            return False
        self._contents.remove(visible)
        return True

    def show_more(self, count: int) -> None:
        """Stop bounding the list and let ``count`` stashed entities back."""
        self._bounded = False
        self._stash.set_goal(count)
        for _ in range(count):
            if self._stash.release() is None:
                break

    def bounded(self, bound: bool) -> None:
        self._bounded = bound

    async def consume(self, source: Readable) -> None:
        """Drain a readable into this list until it ends."""
        async for entity in source:
            self.add(entity)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get(self, content_id: str) -> Optional[Content]:
        return self._by_id.get(content_id)

    @property
    def contents(self) -> List[Content]:
        return list(self._contents)

    @property
    def stash(self) -> OverflowStash:
        return self._stash

    def __len__(self) -> int:
        return len(self._contents)

    def __contains__(self, content: Content) -> bool:
        return self._by_id.get(getattr(content, 'id', None)) is content

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _has_visible_vacancy(self) -> bool:
        return len(self._contents) < self._max_visible_items

    def _insert(self, content: Content) -> None:
        key = self._sort_key(content)
        index = len(self._contents)
        for i, other in enumerate(self._contents):
            if key > self._sort_key(other):
                index = i
                break
        self._contents.insert(index, content)
        self._by_id[content.id] = content

    def _attach(self, oembed: Oembed) -> Optional[Content]:
        target = self._by_id.get(oembed.target_id) if oembed.target_id else None
        if target is None:
            LOG.debug("no visible target %s for attachment %s", oembed.target_id, oembed.id)
            return None
        target.add_attachment(oembed)
        return target

    def _on_stash_signal(self, signal: Signal) -> None:
        if not isinstance(signal, DataAvailable):
            return
        content = self._stash.read()
        while content is not None:
            self.add(content)
            content = self._stash.read()
