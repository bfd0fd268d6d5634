from unittest.mock import MagicMock, patch

import redis

from mutualmatch.models.match import ProfileSummary
from mutualmatch.utils.cache import RedisClient, delete_cache, get_cache_model, set_cache_model


def test_client_disabled_without_url():
    assert RedisClient.get_client() is None
    assert RedisClient._failed is True


@patch("mutualmatch.utils.cache.redis.Redis")
@patch("mutualmatch.utils.cache.redis.ConnectionPool.from_url")
def test_client_created_from_url(mock_from_url, mock_redis, monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")

    client = RedisClient.get_client()

    mock_from_url.assert_called_once_with("redis://localhost:6379/0", max_connections=10, decode_responses=True)
    assert client is mock_redis.return_value
    assert RedisClient.get_client() is client


@patch("mutualmatch.utils.cache.redis.ConnectionPool.from_url", side_effect=ValueError("bad url"))
def test_client_init_failure_disables_cache(mock_from_url, monkeypatch):
    monkeypatch.setenv("REDIS_URL", "not-a-redis-url")

    assert RedisClient.get_client() is None
    assert RedisClient._failed is True


@patch.object(RedisClient, "get_client")
def test_set_cache_model(mock_get_client):
    client = MagicMock()
    mock_get_client.return_value = client
    profile = ProfileSummary(user_id="u1", display_name="Andrew")

    set_cache_model("profile:u1", profile, expiration=60)

    client.set.assert_called_once_with("profile:u1", profile.model_dump_json(), ex=60)


@patch.object(RedisClient, "get_client")
def test_set_cache_model_forces_expiration(mock_get_client):
    client = MagicMock()
    mock_get_client.return_value = client

    set_cache_model("profile:u1", ProfileSummary(user_id="u1", display_name="Andrew"), expiration=0)

    assert client.set.call_args[1]["ex"] == 3600


@patch.object(RedisClient, "get_client")
def test_set_cache_model_swallows_redis_errors(mock_get_client):
    client = MagicMock()
    client.set.side_effect = redis.ConnectionError("down")
    mock_get_client.return_value = client

    set_cache_model("profile:u1", ProfileSummary(user_id="u1", display_name="Andrew"))


@patch.object(RedisClient, "get_client")
def test_get_cache_model_hit(mock_get_client):
    client = MagicMock()
    client.get.return_value = ProfileSummary(user_id="u1", display_name="Andrew").model_dump_json()
    mock_get_client.return_value = client

    profile = get_cache_model("profile:u1", ProfileSummary)

    assert profile.display_name == "Andrew"


@patch.object(RedisClient, "get_client")
def test_get_cache_model_miss(mock_get_client):
    client = MagicMock()
    client.get.return_value = None
    mock_get_client.return_value = client

    assert get_cache_model("profile:u1", ProfileSummary) is None


@patch.object(RedisClient, "get_client")
def test_get_cache_model_corrupt(mock_get_client):
    client = MagicMock()
    client.get.return_value = "{not json"
    mock_get_client.return_value = client

    assert get_cache_model("profile:u1", ProfileSummary) is None


@patch.object(RedisClient, "get_client")
def test_get_cache_model_redis_error(mock_get_client):
    client = MagicMock()
    client.get.side_effect = redis.TimeoutError("slow")
    mock_get_client.return_value = client

    assert get_cache_model("profile:u1", ProfileSummary) is None


@patch.object(RedisClient, "get_client")
def test_delete_cache(mock_get_client):
    client = MagicMock()
    mock_get_client.return_value = client

    delete_cache("profile:u1")

    client.delete.assert_called_once_with("profile:u1")


@patch.object(RedisClient, "get_client", return_value=None)
def test_disabled_cache_is_noop(mock_get_client):
    set_cache_model("profile:u1", ProfileSummary(user_id="u1", display_name="Andrew"))
    delete_cache("profile:u1")

    assert get_cache_model("profile:u1", ProfileSummary) is None
