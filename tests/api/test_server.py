"""
SSE Relay Tests

Health check and event framing of the collection stream endpoint.
"""

import json

import pytest
from fastapi.testclient import TestClient

from streamhub.api.server import app, get_service_factory
from streamhub.contracts.base import ClientError
from streamhub.service import LiveFeedService

from ..fixtures import ScriptedClient, bootstrap_response, data_response, make_oembed_state, make_state

STREAM_URL = "/api/v1/collections/n1/s1/a1/stream"


def parse_frames(body):
    frames = []
    for block in body.strip().split("\n\n"):
        event = "message"
        data = None
        for line in block.splitlines():
            if line.startswith("event: "):
                event = line[len("event: "):]
            elif line.startswith("data: "):
                data = json.loads(line[len("data: "):])
        frames.append((event, data))
    return frames


@pytest.fixture
def relay(monkeypatch):
    monkeypatch.delenv("STREAMHUB_CONFIG", raising=False)
    built = []

    def use_script(bootstrap_script, stream_script):
        def factory(config):
            service = LiveFeedService(
                config,
                bootstrap_client=ScriptedClient(bootstrap_script),
                stream_client=ScriptedClient(stream_script),
            )
            built.append((config, service))
            return service
        app.dependency_overrides[get_service_factory] = lambda: factory

    with TestClient(app) as client:
        yield client, use_script, built
    app.dependency_overrides.clear()


def test_health(relay):
    client, _, _ = relay

    response = client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_entities_are_relayed_then_error_ends_the_stream(relay):
    client, use_script, built = relay
    use_script([bootstrap_response()], [
        data_response({"1": make_state("1", body="hi")}, "E1"),
        data_response({"o": make_oembed_state("o1", target_id="1")}, "E2"),
        ClientError("gone"),
    ])

    response = client.get(STREAM_URL, params={"environment": "qa.livefyre.com"})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/event-stream")
    frames = parse_frames(response.text)
    assert [event for event, _ in frames] == ["message", "message", "error"]
    assert frames[0][1]["id"] == "1"
    assert frames[0][1]["body"] == "hi"
    assert frames[1][1]["kind"] == "attachment"
    assert frames[1][1]["target_id"] == "1"
    assert frames[2][1]["code"] == "STREAM_FAILED"

    config, service = built[0]
    assert (config.network, config.site_id, config.article_id) == ("n1", "s1", "a1")
    assert config.environment == "qa.livefyre.com"
    assert service.updater.closed


def test_bootstrap_failure_is_reported_as_error_event(relay):
    client, use_script, _ = relay
    use_script([ClientError("down")], [])

    response = client.get(STREAM_URL)

    frames = parse_frames(response.text)
    assert frames == [("error", {"code": "BOOTSTRAP_FAILED", "error": frames[0][1]["error"]})]
