"""
Clients

HTTP clients for the StreamHub Bootstrap and Stream services. Both expose
``async get_content(options) -> dict`` and raise ClientError on failure.
"""

from .base import StreamHubClient, service_host, DEFAULT_USER_AGENT
from .bootstrap import LivefyreBootstrapClient
from .stream import LivefyreStreamClient, DEFAULT_LONG_POLL_TIMEOUT

__all__ = [
    'StreamHubClient',
    'service_host',
    'DEFAULT_USER_AGENT',
    'LivefyreBootstrapClient',
    'LivefyreStreamClient',
    'DEFAULT_LONG_POLL_TIMEOUT',
]
