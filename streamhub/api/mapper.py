"""
API Mapper
==========

Transforms content entities into wire DTOs for the SSE relay and the CLI.
Exposes the entity as delivered, without ranking or filtering.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..content.types import Content, Entity, Oembed


class OembedDTO(BaseModel):
    id: Optional[str] = None
    type: str
    url: Optional[str] = None
    provider_name: Optional[str] = None
    title: Optional[str] = None
    thumbnail_url: Optional[str] = None
    html: Optional[str] = None
    target_id: Optional[str] = None


class ContentDTO(BaseModel):
    kind: str = "content"
    id: str
    body: str
    author: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    visibility: str
    parent_id: Optional[str] = None
    source: str
    featured: bool = False
    attachments: List[OembedDTO] = Field(default_factory=list)
    replies: List["ContentDTO"] = Field(default_factory=list)


ContentDTO.model_rebuild()


def map_oembed_to_dto(oembed: Oembed) -> OembedDTO:
    return OembedDTO(
        id=oembed.id,
        type=oembed.type,
        url=oembed.url,
        provider_name=oembed.provider_name,
        title=oembed.title,
        thumbnail_url=oembed.thumbnail_url,
        html=oembed.html,
        target_id=oembed.target_id,
    )


def map_content_to_dto(content: Content) -> ContentDTO:
    """Map a Content (and its replies) to a ContentDTO."""
    return ContentDTO(
        id=content.id,
        body=content.body,
        author=content.author,
        created_at=content.created_at,
        updated_at=content.updated_at,
        visibility=content.visibility.name,
        parent_id=content.parent_id,
        source=content.source,
        featured=content.is_featured(),
        attachments=[map_oembed_to_dto(a) for a in content.attachments],
        replies=[map_content_to_dto(r) for r in content.replies],
    )


def map_entity_to_dict(entity: Entity) -> Dict[str, Any]:
    """JSON-ready dict for either entity variant."""
    if isinstance(entity, Oembed):
        data = map_oembed_to_dto(entity).model_dump(mode="json")
        data["kind"] = "attachment"
        return data
    return map_content_to_dto(entity).model_dump(mode="json")
