"""
Configuration

Frozen configuration for building a live collection feed.

SOURCES (later wins):
=====================
1. Dataclass defaults
2. JSON file (``StreamHubConfig.load``)
3. ``STREAMHUB_*`` environment variables (``from_env``)
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional
import json
import logging
import os

from .contracts.base import CollectionIdentity
from .clients.base import DEFAULT_REQUEST_TIMEOUT, DEFAULT_USER_AGENT
from .clients.stream import DEFAULT_LONG_POLL_TIMEOUT
from .streams.readable import DEFAULT_HIGH_WATER_MARK
from .streams.stash import DEFAULT_RELEASE_INTERVAL
from .content.content_list import DEFAULT_MAX_VISIBLE_ITEMS

ENV_PREFIX = "STREAMHUB_"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ClientConfig:
    """HTTP settings shared by the bootstrap and stream clients."""
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    long_poll_timeout: float = DEFAULT_LONG_POLL_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    scheme: str = "https"

    def __post_init__(self):
        if self.request_timeout <= 0 or self.long_poll_timeout <= 0:
            raise ValueError("timeouts must be positive")
        if self.scheme not in ("http", "https"):
            raise ValueError(f"unsupported scheme {self.scheme!r}")


@dataclass(frozen=True)
class StreamHubConfig:
    """Everything needed to follow one collection."""
    network: Optional[str] = None
    site_id: Optional[str] = None
    article_id: Optional[str] = None
    environment: Optional[str] = None

    high_water_mark: int = DEFAULT_HIGH_WATER_MARK
    stash_release_interval: int = DEFAULT_RELEASE_INTERVAL
    stash_auto_goal: bool = False
    max_visible_items: int = DEFAULT_MAX_VISIBLE_ITEMS
    log_level: str = "INFO"

    client: ClientConfig = field(default_factory=ClientConfig)

    def __post_init__(self):
        if self.high_water_mark < 0:
            raise ValueError("high_water_mark must be >= 0")
        if self.stash_release_interval < 1:
            raise ValueError("stash_release_interval must be >= 1")
        if self.max_visible_items < 1:
            raise ValueError("max_visible_items must be >= 1")
        level = str(self.log_level).upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"unknown log_level {self.log_level!r}")
        object.__setattr__(self, 'log_level', level)

    @property
    def identity(self) -> CollectionIdentity:
        """The collection identity; raises ValueError if incomplete."""
        return CollectionIdentity(
            network=self.network,
            site_id=self.site_id,
            article_id=self.article_id,
            environment=self.environment,
        )

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.log_level)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StreamHubConfig:
        """Build from a mapping using the dataclass field names."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(sorted(unknown))}")
        values = dict(data)
        if isinstance(values.get('client'), Mapping):
            values['client'] = ClientConfig(**values['client'])
        return cls(**values)

    @classmethod
    def load(cls, config_path: Path) -> StreamHubConfig:
        """Load from a JSON file."""
        with open(config_path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def with_overrides(self, **overrides: Any) -> StreamHubConfig:
        """Copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **values) if values else self

    def from_env(self, environ: Optional[Mapping[str, str]] = None) -> StreamHubConfig:
        """Copy with ``STREAMHUB_*`` environment overrides applied."""
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for name in ('network', 'site_id', 'article_id', 'environment', 'log_level'):
            value = environ.get(ENV_PREFIX + name.upper())
            if value:
                overrides[name] = value
        for name in ('high_water_mark', 'stash_release_interval', 'max_visible_items'):
            value = environ.get(ENV_PREFIX + name.upper())
            if value:
                overrides[name] = int(value)
        auto_goal = environ.get(ENV_PREFIX + 'STASH_AUTO_GOAL')
        if auto_goal:
            overrides['stash_auto_goal'] = auto_goal.lower() in ("1", "true", "yes")

        client_overrides: Dict[str, Any] = {}
        for name in ('request_timeout', 'long_poll_timeout'):
            value = environ.get(ENV_PREFIX + name.upper())
            if value:
                client_overrides[name] = float(value)
        if client_overrides:
            overrides['client'] = replace(self.client, **client_overrides)

        return self.with_overrides(**overrides)
