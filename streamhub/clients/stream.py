"""Client for the StreamHub Stream (long-poll) web service."""

from __future__ import annotations
from typing import Any, Dict

from .base import StreamHubClient, service_host

# The server holds a stream request open for up to a minute
DEFAULT_LONG_POLL_TIMEOUT = 75.0


class LivefyreStreamClient(StreamHubClient):
    """
    Requests the next page of events after ``options['commentId']``.

    Returns ``{'timeout': True}`` when the long poll elapsed without data,
    otherwise the unwrapped ``data`` object (``states``, ``maxEventId``,
    ``authors``).
    """

    def __init__(self, *args, timeout: float = DEFAULT_LONG_POLL_TIMEOUT, **kwargs):
        super().__init__(*args, timeout=timeout, **kwargs)

    def build_url(self, options: Dict[str, Any]) -> str:
        host = service_host('stream1', options['network'], options.get('environment'))
        comment_id = options.get('commentId') or 0
        return f"{self._scheme}://{host}/v3.0/collection/{options['collectionId']}/{comment_id}/"

    def _unwrap(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        if payload.get('timeout'):
            return {'timeout': True}
        data = payload.get('data')
        if isinstance(data, dict):
            return data
        return payload
