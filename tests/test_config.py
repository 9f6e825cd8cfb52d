"""
Configuration Tests

Defaults, file loading, environment overrides and validation.
"""

import json

import pytest

from streamhub.config import ClientConfig, StreamHubConfig
from streamhub.contracts.base import CollectionIdentity


class TestDefaults:

    def test_defaults(self):
        config = StreamHubConfig()

        assert config.high_water_mark == 16
        assert config.stash_release_interval == 5
        assert config.max_visible_items == 50
        assert config.log_level == "INFO"
        assert config.client.request_timeout == 30.0
        assert config.client.long_poll_timeout == 75.0

    def test_incomplete_identity_is_rejected(self):
        with pytest.raises(ValueError):
            StreamHubConfig(network="n1").identity

    def test_identity(self):
        config = StreamHubConfig(network="n1", site_id="s1", article_id="a1", environment="qa")

        assert config.identity == CollectionIdentity("n1", "s1", "a1", environment="qa")

    def test_log_level_is_normalized(self):
        assert StreamHubConfig(log_level="debug").log_level == "DEBUG"

    @pytest.mark.parametrize("kwargs", [
        {'high_water_mark': -1},
        {'stash_release_interval': 0},
        {'max_visible_items': 0},
        {'log_level': "LOUD"},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            StreamHubConfig(**kwargs)

    def test_invalid_client_values(self):
        with pytest.raises(ValueError):
            ClientConfig(request_timeout=0)
        with pytest.raises(ValueError):
            ClientConfig(scheme="ftp")


class TestSources:

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "feed.json"
        path.write_text(json.dumps({
            'network': "n1",
            'site_id': "s1",
            'article_id': "a1",
            'high_water_mark': 4,
            'client': {'long_poll_timeout': 10},
        }))

        config = StreamHubConfig.load(path)

        assert config.high_water_mark == 4
        assert config.client.long_poll_timeout == 10
        assert config.client.request_timeout == 30.0

    def test_unknown_keys_are_rejected(self):
        with pytest.raises(ValueError, match="colour"):
            StreamHubConfig.from_dict({'colour': "blue"})

    def test_environment_overrides(self):
        environ = {
            'STREAMHUB_NETWORK': "env.fyre.co",
            'STREAMHUB_SITE_ID': "42",
            'STREAMHUB_HIGH_WATER_MARK': "8",
            'STREAMHUB_LONG_POLL_TIMEOUT': "12.5",
            'STREAMHUB_LOG_LEVEL': "warning",
            'UNRELATED': "x",
        }

        config = StreamHubConfig(network="file.fyre.co", article_id="a1").from_env(environ)

        assert config.network == "env.fyre.co"
        assert config.site_id == "42"
        assert config.article_id == "a1"
        assert config.high_water_mark == 8
        assert config.client.long_poll_timeout == 12.5
        assert config.log_level == "WARNING"

    def test_stash_auto_goal_from_environment(self):
        assert StreamHubConfig().stash_auto_goal is False
        assert StreamHubConfig().from_env({'STREAMHUB_STASH_AUTO_GOAL': "true"}).stash_auto_goal is True

    def test_empty_environment_changes_nothing(self):
        config = StreamHubConfig(network="n1")

        assert config.from_env({}) is config

    def test_overrides_skip_none(self):
        config = StreamHubConfig(network="n1", site_id="s1")

        updated = config.with_overrides(network=None, site_id="s2")

        assert updated.network == "n1"
        assert updated.site_id == "s2"
