from unittest.mock import MagicMock

import pytest
import redis
from redis.exceptions import ConnectionError as RedisConnectionError

from storefront.services.cart_store import RedisCartStore


@pytest.fixture
def client():
    return MagicMock(spec=redis.Redis)


@pytest.fixture
def store(client):
    return RedisCartStore(client=client, ttl=600)


def test_set_quantity_upserts_and_refreshes_ttl_in_one_pipeline(store, client):
    pipe = client.pipeline.return_value

    store.set_quantity(7, 3, 2)

    pipe.hset.assert_called_once_with("cart:7", "3", 2)
    pipe.expire.assert_called_once_with("cart:7", 600)
    pipe.execute.assert_called_once_with()
    client.hset.assert_not_called()
    client.expire.assert_not_called()


@pytest.mark.parametrize("quantity", [0, -1])
def test_non_positive_quantity_removes(store, client, quantity):
    store.set_quantity(7, 3, quantity)

    client.pipeline.assert_not_called()
    client.hdel.assert_called_once_with("cart:7", "3")


def test_get_all_parses_hash(store, client):
    client.hgetall.return_value = {"3": "2", "10": "1"}

    assert store.get_all(7) == {3: 2, 10: 1}


def test_get_all_of_unknown_user_is_empty(store, client):
    client.hgetall.return_value = {}

    assert store.get_all(8) == {}


def test_remove_and_clear(store, client):
    store.remove(7, 3)
    store.clear(7)

    client.hdel.assert_called_once_with("cart:7", "3")
    client.delete.assert_called_once_with("cart:7")


def test_discard_entries_sends_pairs_to_script(store, client):
    client.eval.return_value = 1

    removed = store.discard_entries(7, {3: 2, 10: 1})

    assert removed == 1
    script, numkeys, key, *args = client.eval.call_args.args
    assert "HDEL" in script
    assert (numkeys, key) == (1, "cart:7")
    assert args == ["3", "2", "10", "1"]


def test_discard_nothing_skips_redis(store, client):
    assert store.discard_entries(7, {}) == 0
    client.eval.assert_not_called()


def test_transient_redis_error_is_retried(store, client):
    client.hgetall.side_effect = [RedisConnectionError("reset"), {"1": "1"}]

    assert store.get_all(7) == {1: 1}
    assert client.hgetall.call_count == 2


def test_removal_through_set_quantity_stops_after_three_attempts(store, client):
    client.hdel.side_effect = RedisConnectionError("reset")

    with pytest.raises(RedisConnectionError):
        store.set_quantity(7, 3, 0)

    assert client.hdel.call_count == 3
