"""
Client Base

Shared HTTP plumbing for the StreamHub web service clients.

PRINCIPLES:
===========
1. The HTTP client is injected or owned, never a module-level default
2. Every failure surfaces as ClientError with an explicit ErrorCode
3. Clients only fetch and decode; they never interpret content
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import logging

import httpx

from ..contracts.base import ClientError, ErrorCode

LOG = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "streamhub-live/0.1"
DEFAULT_REQUEST_TIMEOUT = 30.0


class StreamHubClient(ABC):
    """
    Base for clients of one StreamHub web service.

    Subclasses build the URL; this class performs the GET and decodes JSON.
    """

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        scheme: str = "https"
    ):
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._timeout = timeout
        self._user_agent = user_agent
        self._scheme = scheme

    @abstractmethod
    def build_url(self, options: Dict[str, Any]) -> str:
        """Return the URL to request for the given collection options."""

    async def get_content(self, options: Dict[str, Any]) -> Dict[str, Any]:
        """Request the service and return the decoded response."""
        return self._unwrap(await self._get_json(self.build_url(options)))

    def _unwrap(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return payload

    async def _get_json(self, url: str) -> Dict[str, Any]:
        LOG.debug("GET %s", url)
        try:
            response = await self._http.get(
                url,
                headers={'User-Agent': self._user_agent},
                timeout=self._timeout,
                follow_redirects=True
            )
        except httpx.TimeoutException as exc:
            raise ClientError(
                f"Timed out requesting {url}", code=ErrorCode.NETWORK_ERROR
            ) from exc
        except httpx.HTTPError as exc:
            raise ClientError(
                f"Network error requesting {url}: {exc}", code=ErrorCode.NETWORK_ERROR
            ) from exc

        if response.status_code != 200:
            raise ClientError(
                f"HTTP {response.status_code} from {url}", code=ErrorCode.HTTP_ERROR
            ).with_context('status', str(response.status_code))

        try:
            payload = response.json()
        except ValueError as exc:
            raise ClientError(
                f"Response from {url} is not JSON", code=ErrorCode.SERVER_ERROR
            ) from exc

        if not isinstance(payload, dict):
            raise ClientError(
                f"Response from {url} is not a JSON object", code=ErrorCode.SERVER_ERROR
            )
        if payload.get('status') == 'error':
            raise ClientError(
                payload.get('msg') or f"Error status from {url}",
                code=ErrorCode.SERVER_ERROR
            ).with_context('code', str(payload.get('code')))
        return payload

    async def aclose(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()


def service_host(service: str, network: str, environment: Optional[str] = None) -> str:
    """
    Host for a StreamHub service.

    The livefyre.com network is served from ``{service}.{environment}``;
    custom networks from ``{network-prefix}.{service}.fyre.co``.
    """
    if network == 'livefyre.com':
        return f"{service}.{environment or 'livefyre.com'}"
    prefix = network.split('.')[0]
    return f"{prefix}.{service}.fyre.co"
