"""
Streaming Fixtures

Scripted collaborators for driving the collection updater deterministically.

RULES:
======
1. Scripts are EXPLICIT lists of responses or exceptions, never random
2. An exhausted script blocks like an open long poll
3. Every request's options are recorded for cursor assertions
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import asyncio

from streamhub.contracts.base import CollectionIdentity


IDENTITY = CollectionIdentity(network="n1", site_id="s1", article_id="a1")

IDENTITY_OPTIONS = {'network': "n1", 'siteId': "s1", 'articleId': "a1"}

TIMEOUT = {'timeout': True}

AUTHOR_ID = "author1@livefyre.com"

AUTHORS = {AUTHOR_ID: {'id': AUTHOR_ID, 'displayName': "Author One"}}


# =============================================================================
# RAW STATE BUILDERS
# =============================================================================

def make_state(
    content_id: str,
    body: str = "hello",
    vis: Optional[int] = 1,
    created_at: int = 1_700_000_000,
    source: int = 0,
    parent_id: str = "",
    annotations: Optional[Dict[str, Any]] = None,
    children: Iterable[Dict[str, Any]] = (),
) -> Dict[str, Any]:
    state = {
        'type': 0,
        'source': source,
        'content': {
            'id': content_id,
            'bodyHtml': body,
            'authorId': AUTHOR_ID,
            'createdAt': created_at,
            'updatedAt': created_at,
            'parentId': parent_id,
            'annotations': annotations or {},
        },
        'childContent': list(children),
    }
    if vis is not None:
        state['vis'] = vis
    return state


def make_oembed_state(oembed_id: str, target_id: Optional[str] = None) -> Dict[str, Any]:
    content = {
        'id': oembed_id,
        'oembed': {
            'type': "photo",
            'url': f"https://img.example.com/{oembed_id}.jpg",
            'provider_name': "Example",
        },
    }
    if target_id is not None:
        content['targetId'] = target_id
    return {'type': 3, 'vis': 1, 'source': 0, 'content': content}


def bootstrap_response(event: Any = "E0", collection_id: Any = "C1") -> Dict[str, Any]:
    return {
        'collectionSettings': {'event': event, 'collectionId': collection_id},
        'headDocument': {'content': []},
    }


def data_response(states: Dict[str, Any], max_event_id: Any) -> Dict[str, Any]:
    return {'states': states, 'maxEventId': max_event_id, 'authors': AUTHORS}


# =============================================================================
# SCRIPTED CLIENTS
# =============================================================================

class ScriptedClient:
    """
    Fake bootstrap/stream client.

    Each request pops the next scripted item: a dict is returned, an
    exception is raised. With nothing left, the request never resolves.
    """

    def __init__(self, script: Iterable[Any] = ()):
        self.script: List[Any] = list(script)
        self.calls: List[Dict[str, Any]] = []

    async def get_content(self, options: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(dict(options))
        if not self.script:
            await asyncio.Event().wait()
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item

    @property
    def cursors(self) -> List[Any]:
        return [call.get('commentId') for call in self.calls]


# =============================================================================
# LOOP HELPERS
# =============================================================================

async def settle(turns: int = 50) -> None:
    """Let pending tasks run to their next blocking point."""
    for _ in range(turns):
        await asyncio.sleep(0)


async def take(readable, count: int, timeout: float = 1.0) -> List[Any]:
    """Read ``count`` entities through async iteration."""
    items = []
    for _ in range(count):
        items.append(await asyncio.wait_for(readable.__anext__(), timeout))
    return items
