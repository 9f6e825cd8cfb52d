"""
Base Contracts and Shared Types

Foundational types shared by every layer of the streaming engine.

BOUNDARY ENFORCEMENT:
=====================
- Clients, translator and streams import types from here
- This module imports nothing from the other layers
- Identity and signal types are frozen dataclasses
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple, Union
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for the streaming engine.
    Every failure the consumer can observe is enumerated here.
    """
    # Collection updater errors
    BOOTSTRAP_FAILED = auto()
    STREAM_FAILED = auto()
    MALFORMED_RESPONSE = auto()

    # Client errors
    HTTP_ERROR = auto()
    NETWORK_ERROR = auto()
    SERVER_ERROR = auto()


class StreamHubError(Exception):
    """
    Base exception carrying an enumerated code and immutable context.

    The original cause, when there is one, is chained via ``__cause__``.
    """

    default_code = ErrorCode.STREAM_FAILED

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        context: Tuple[Tuple[str, str], ...] = ()
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.timestamp = datetime.now(timezone.utc)
        self.context = tuple(context)

    def with_context(self, key: str, value: str) -> StreamHubError:
        """Add a context pair and return self for chaining."""
        self.context = self.context + ((key, value),)
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{k}={v}" for k, v in self.context)
        return f"{self.message} ({details})"


class BootstrapError(StreamHubError):
    """The initial bootstrap request failed. Terminal for the updater."""
    default_code = ErrorCode.BOOTSTRAP_FAILED


class StreamError(StreamHubError):
    """A streaming request failed. Terminal for automatic polling."""
    default_code = ErrorCode.STREAM_FAILED


class ClientError(StreamHubError):
    """A network client could not obtain a usable response."""
    default_code = ErrorCode.NETWORK_ERROR


# =============================================================================
# IDENTITY TYPES (Immutable)
# =============================================================================

@dataclass(frozen=True)
class CollectionIdentity:
    """
    Caller-supplied identity of a StreamHub collection.
    Immutable for the lifetime of any updater built from it.
    """
    network: str
    site_id: str
    article_id: str
    environment: Optional[str] = None

    def __post_init__(self):
        for name in ('network', 'site_id', 'article_id'):
            value = getattr(self, name)
            if value is None or value == "":
                raise ValueError(f"CollectionIdentity.{name} must be non-empty")
        if not isinstance(self.network, str):
            raise ValueError("CollectionIdentity.network must be a string")

    def to_options(self) -> Dict[str, Any]:
        """Render as the option mapping the clients expect."""
        options: Dict[str, Any] = {
            'network': self.network,
            'siteId': self.site_id,
            'articleId': self.article_id,
        }
        if self.environment:
            options['environment'] = self.environment
        return options


# =============================================================================
# SIGNALS (Typed notification channel)
# =============================================================================

@dataclass(frozen=True)
class DataAvailable:
    """New entities were pushed and can be read."""
    count: int


@dataclass(frozen=True)
class StreamFailed:
    """The producer failed. Delivered exactly once per readable."""
    error: StreamHubError


@dataclass(frozen=True)
class StreamClosed:
    """The readable was closed by its owner."""
    reason: str = field(default="closed")


Signal = Union[DataAvailable, StreamFailed, StreamClosed]
