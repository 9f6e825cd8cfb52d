"""
Content Layer

Content entities, the state translator, and the bounded visible list.
"""

from .types import Content, LivefyreContent, Oembed, Visibility, Entity
from .state_to_content import StateToContent, StateType

__all__ = [
    'Content',
    'LivefyreContent',
    'Oembed',
    'Visibility',
    'Entity',
    'StateToContent',
    'StateType',
]
