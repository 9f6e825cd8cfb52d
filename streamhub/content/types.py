"""
Content Types

Content entities produced by the translator and consumed by content lists.

IDENTITY:
=========
- Entities are mutable: a later state record for the same id updates the
  existing object in place (see ``Content.update_from``)
- Equality is object identity; lookup by id is the consumer's job
- ``Oembed`` is a separate attachment variant, never a ``Content``
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union


class Visibility(Enum):
    """Visibility values as defined by the StreamHub state API."""
    NONE = 0
    EVERYONE = 1
    OWNER = 2
    GROUP = 3


# Index is the numeric ``source`` of a state record
SOURCES = (
    "livefyre",    # 0
    "twitter",     # 1
    "twitter",     # 2
    "facebook",    # 3
    "livefyre",    # 4
    "livefyre",    # 5
    "facebook",    # 6
    "twitter",     # 7
    "livefyre",    # 8
    "unknown",
    "unknown",
    "unknown",
    "unknown",
    "feed",        # 13
    "facebook",    # 14
    "unknown",
    "unknown",
    "unknown",
    "unknown",
    "instagram",   # 19
)


def source_name(index: Optional[int]) -> str:
    """Map a numeric state source to its name."""
    if isinstance(index, int) and 0 <= index < len(SOURCES):
        return SOURCES[index]
    return "unknown"


@dataclass(frozen=True)
class Oembed:
    """
    An oEmbed attachment.

    ``target_id`` is set when the attachment arrived as its own state record
    and must be attached to an already-known content by the consumer.
    """
    id: Optional[str]
    type: str
    url: Optional[str] = None
    provider_name: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    html: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    target_id: Optional[str] = None


@dataclass(eq=False)
class Content:
    """A piece of content in a StreamHub collection."""
    id: str
    body: str = ""
    author: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    visibility: Visibility = Visibility.EVERYONE
    parent_id: Optional[str] = None
    source: str = "unknown"
    attachments: List[Oembed] = field(default_factory=list)
    replies: List['Content'] = field(default_factory=list)
    annotations: Dict[str, Any] = field(default_factory=dict)
    featured: Any = False
    meta: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_public(self) -> bool:
        return self.visibility is Visibility.EVERYONE

    def add_attachment(self, oembed: Oembed) -> bool:
        """Attach an oembed unless one with the same id is already attached."""
        if oembed.id and any(a.id == oembed.id for a in self.attachments):
            return False
        self.attachments.append(oembed)
        return True

    def add_reply(self, reply: Content) -> bool:
        """Add a reply unless one with the same id is already present."""
        if reply.id and any(r.id == reply.id for r in self.replies):
            return False
        self.replies.append(reply)
        return True

    def is_featured(self) -> bool:
        return bool(self.featured)

    def featured_value(self) -> Optional[Any]:
        """The featured value, if featured."""
        if isinstance(self.featured, dict):
            return self.featured.get('value')
        return None

    def update_from(self, other: Content) -> None:
        """Mutate this entity in place with the state of a newer one."""
        self.body = other.body
        if other.author is not None:
            self.author = other.author
        if other.created_at is not None:
            self.created_at = other.created_at
        self.updated_at = other.updated_at
        self.visibility = other.visibility
        self.parent_id = other.parent_id
        self.source = other.source
        self.annotations = dict(other.annotations)
        self.featured = other.featured
        self.meta = other.meta
        for attachment in other.attachments:
            self.add_attachment(attachment)
        for reply in other.replies:
            self.add_reply(reply)


class LivefyreContent(Content):
    """Content that originated from a Livefyre state record."""


Entity = Union[Content, Oembed]
