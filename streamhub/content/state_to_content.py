"""
State to Content
================

Translates raw StreamHub state records into content entities.

CONTRACT:
=========
1. Constructed fresh for every response payload; holds no state across payloads
2. ``write(state)`` synchronously produces zero or one entity through ``on_content``
3. Malformed records are dropped and logged; they never fail the batch
4. The Content / Oembed variant is decided HERE, once

DOES NOT:
=========
- Deduplicate or merge entities by id (consumer's job)
- Filter by visibility (non-public records still produce an entity)
"""

from __future__ import annotations
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional
import logging

from .types import Content, Entity, LivefyreContent, Oembed, Visibility, source_name

LOG = logging.getLogger(__name__)


class StateType(Enum):
    """State record ``type`` values."""
    CONTENT = 0
    DELETED = 1
    OPINE = 2
    OEMBED = 3


class MalformedStateError(ValueError):
    """A single state record could not be translated."""


class StateToContent:
    """
    Per-payload translator.

    Usage:
        contents = []
        translator = StateToContent(payload, on_content=contents.append)
        for state in payload['states'].values():
            translator.write(state)
    """

    def __init__(
        self,
        payload: Optional[Mapping[str, Any]] = None,
        on_content: Optional[Callable[[Entity], None]] = None
    ):
        payload = payload or {}
        authors = payload.get('authors')
        self._authors: Mapping[str, Any] = authors if isinstance(authors, Mapping) else {}
        self._on_content = on_content
        self.produced = 0
        self.dropped = 0

    def write(self, state: Any) -> Optional[Entity]:
        """Translate one record; emit and return the entity if one results."""
        try:
            entity = self.transform(state)
        except MalformedStateError as exc:
            self.dropped += 1
            LOG.debug("Dropping malformed state record: %s", exc)
            return None
        if entity is None:
            return None
        self.produced += 1
        if self._on_content is not None:
            self._on_content(entity)
        return entity

    def transform(self, state: Any) -> Optional[Entity]:
        """Pure translation of one record, including its child states."""
        if not isinstance(state, Mapping):
            raise MalformedStateError(f"state is {type(state).__name__}, not a mapping")
        content_json = state.get('content')
        if not isinstance(content_json, Mapping):
            raise MalformedStateError("state has no content object")

        try:
            state_type = StateType(state.get('type', StateType.CONTENT.value))
        except ValueError:
            raise MalformedStateError(f"unknown state type {state.get('type')!r}")

        if state_type is StateType.OEMBED:
            entity: Entity = self._create_oembed(content_json)
        elif state_type is StateType.CONTENT:
            entity = self._create_content(state, content_json)
        else:
            return None

        children = state.get('childContent') or ()
        if not isinstance(children, (list, tuple)):
            raise MalformedStateError(f"childContent is {type(children).__name__}, not a list")

        for child_state in children:
            try:
                child = self.transform(child_state)
            except MalformedStateError as exc:
                LOG.debug("Dropping malformed child state: %s", exc)
                continue
            if child is None or not isinstance(entity, Content):
                continue
            if isinstance(child, Oembed):
                entity.add_attachment(child)
            else:
                entity.add_reply(child)

        return entity

    def _create_content(self, state: Mapping[str, Any], content_json: Mapping[str, Any]) -> Content:
        content_id = content_json.get('id') or state.get('id')
        if not content_id:
            raise MalformedStateError("content record has no id")

        vis = state.get('vis')
        try:
            visibility = Visibility.EVERYONE if vis is None else Visibility(vis)
        except ValueError:
            raise MalformedStateError(f"unknown visibility {vis!r}")

        annotations = content_json.get('annotations') or {}
        if not isinstance(annotations, Mapping):
            raise MalformedStateError(f"annotations is {type(annotations).__name__}, not a mapping")

        author_id = content_json.get('authorId')
        if author_id is not None and not isinstance(author_id, str):
            raise MalformedStateError(f"authorId is {type(author_id).__name__}, not a string")

        return LivefyreContent(
            id=str(content_id),
            body=content_json.get('bodyHtml') or "",
            author=self._authors.get(author_id),
            created_at=_from_epoch(content_json.get('createdAt')),
            updated_at=_from_epoch(content_json.get('updatedAt')),
            visibility=visibility,
            parent_id=content_json.get('parentId') or None,
            source=source_name(state.get('source')),
            annotations=dict(annotations),
            featured=annotations.get('featuredmessage') or False,
            meta=dict(state),
        )

    def _create_oembed(self, content_json: Mapping[str, Any]) -> Oembed:
        oembed = content_json.get('oembed')
        if not isinstance(oembed, Mapping) or not oembed.get('type'):
            raise MalformedStateError("oembed record has no oembed type")
        return Oembed(
            id=content_json.get('id'),
            type=oembed['type'],
            url=oembed.get('url'),
            provider_name=oembed.get('provider_name'),
            title=oembed.get('title'),
            thumbnail_url=oembed.get('thumbnail_url'),
            html=oembed.get('html'),
            width=oembed.get('width'),
            height=oembed.get('height'),
            target_id=content_json.get('targetId'),
        )


def _from_epoch(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(float(value), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        raise MalformedStateError(f"bad timestamp {value!r}")
