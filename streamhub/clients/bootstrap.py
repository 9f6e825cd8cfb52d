"""Client for the StreamHub Bootstrap web service."""

from __future__ import annotations
from typing import Any, Dict
import base64

from .base import StreamHubClient, service_host


class LivefyreBootstrapClient(StreamHubClient):
    """
    Requests Bootstrap ``init`` (or an archive page when ``options['page']``
    is given) for a collection.
    """

    def build_url(self, options: Dict[str, Any]) -> str:
        network = options['network']
        environment = options.get('environment')
        article_id = base64.b64encode(str(options['articleId']).encode('utf-8')).decode('ascii')
        page = options.get('page')
        parts = [
            f"{self._scheme}://{service_host('bootstrap', network, environment)}",
            "/bs3/",
            f"{environment}/" if environment else "",
            f"{network}/{options['siteId']}/{article_id}/",
            f"{page}.json" if page is not None else "init",
        ]
        return "".join(parts)
