"""
Tests for session stores and the TTL session cache
"""
import json

import pytest

from flowchat.domain.errors import SessionSerializationError, SessionStoreError
from flowchat.domain.models.conversation import PageOffset, PaginationState, ResponseKind
from flowchat.domain.session.cache_session_store import CacheSessionStore, SessionCache
from flowchat.domain.session.memory_session_store import InMemorySessionStore


def test_get_set_delete(session_backend):
    """Test the basic key/value operations"""
    store = InMemorySessionStore("s1", session_backend)

    assert store.get("name") is None
    assert store.set("name", "John") == "John"
    assert store.get("name") == "John"

    store.delete("name")
    assert store.get("name") is None
    # Deleting a missing key is a no-op
    store.delete("missing")


def test_nested_structures_round_trip(session_backend):
    """Test maps and nested maps survive the store round trip"""
    store = InMemorySessionStore("s1", session_backend)
    value = {"address": {"city": "Nairobi", "lines": ["Plot 4", "Moi Ave"]}, "count": 3, "ok": True}

    store.set("profile", value)

    assert store.get("profile") == value
    assert json.loads(session_backend["s1"]) == {"profile": value}


def test_keys_are_stringified(session_backend):
    """Test non-string keys address the same entry as their string form"""
    store = InMemorySessionStore("s1", session_backend)
    store.set(1, "one")

    assert store.get("1") == "one"
    assert store.get(1) == "one"


def test_clear_keeps_session(session_backend):
    """Test clear drops data but the session still exists"""
    store = InMemorySessionStore("s1", session_backend)
    store.set("a", 1)

    store.clear()

    assert store.exists()
    assert store.to_dict() == {}


def test_destroy_removes_session(session_backend):
    """Test destroy removes the whole session"""
    store = InMemorySessionStore("s1", session_backend)
    store.set("a", 1)

    store.destroy()

    assert not store.exists()
    assert "s1" not in session_backend


def test_clear_on_missing_session_does_not_create_it(session_backend):
    store = InMemorySessionStore("s1", session_backend)
    store.clear()
    assert not store.exists()


def test_sessions_are_isolated(session_backend):
    """Test two session ids never see each other's data"""
    first = InMemorySessionStore("s1", session_backend)
    second = InMemorySessionStore("s2", session_backend)

    first.set("name", "John")

    assert second.get("name") is None


def test_serializable_values_are_stored_as_data(session_backend):
    """Test values with serialize/deserialize are persisted in their serialized form"""
    store = InMemorySessionStore("s1", session_backend)
    state = PaginationState(
        page=2,
        offsets={1: PageOffset(start=0, finish=10), 2: PageOffset(start=11, finish=20)},
        full_text="x" * 20,
        kind=ResponseKind.PROMPT
    )

    store.set("$pagination$", state)
    stored = store.get("$pagination$")

    assert isinstance(stored, dict)
    assert PaginationState.deserialize(stored) == state


def test_unserializable_value_raises(session_backend):
    """Test values that are not JSON serializable are rejected"""
    store = InMemorySessionStore("s1", session_backend)

    with pytest.raises(SessionSerializationError) as exc_info:
        store.set("bad", object())

    assert isinstance(exc_info.value, SessionStoreError)
    assert isinstance(exc_info.value, TypeError)


def test_memory_factory_shares_backend(make_context):
    """Test stores built by one factory share their backend"""
    factory = InMemorySessionStore.factory()

    factory(make_context(session_id="abc")).set("k", "v")

    assert factory(make_context(session_id="abc")).get("k") == "v"
    assert "abc" in factory.backend


def test_cache_get_set_and_expiry(clock):
    """Test cache entries expire after their TTL"""
    cache = SessionCache(clock=clock)
    cache.set("key", "value", ttl=10)

    assert cache.get("key") == "value"
    assert cache.exists("key")

    clock.advance(11)

    assert cache.get("key") is None
    assert not cache.exists("key")


def test_cache_clear_expired_and_stats(clock):
    """Test expired entries are counted and purged"""
    cache = SessionCache(clock=clock)
    cache.set("short", "1", ttl=5)
    cache.set("long", "2", ttl=500)

    clock.advance(10)

    assert cache.get_stats() == {"total_keys": 2, "active_keys": 1, "expired_keys": 1}
    assert cache.clear_expired() == 1
    assert cache.get_stats()["total_keys"] == 1
    assert cache.delete("long") is True
    assert cache.delete("long") is False


def test_cache_session_store_namespaces_keys(clock):
    """Test session documents are namespaced by gateway and session id"""
    cache = SessionCache(clock=clock)
    store = CacheSessionStore("254700000001", cache, gateway="ussd", ttl=60)

    store.set("name", "Jane")

    assert store.session_key == "flowchat:session:ussd:254700000001"
    assert json.loads(cache.get(store.session_key)) == {"name": "Jane"}


def test_cache_session_store_expires_with_ttl(clock):
    """Test an expired session simply starts from empty state"""
    cache = SessionCache(clock=clock)
    store = CacheSessionStore("s1", cache, gateway="ussd", ttl=60)
    store.set("name", "Jane")

    clock.advance(61)

    assert store.get("name") is None
    assert not store.exists()


def test_cache_session_store_factory_uses_gateway_ttl(clock, make_context):
    """Test the factory picks the TTL for the turn's gateway"""
    cache = SessionCache(clock=clock)
    factory = CacheSessionStore.factory(cache, {"ussd": 30, "chat": 300}.get)

    ussd_store = factory(make_context(session_id="u1", gateway="ussd"))
    chat_store = factory(make_context(session_id="c1", gateway="chat"))

    assert ussd_store.ttl == 30
    assert chat_store.ttl == 300
    assert chat_store.session_key == "flowchat:session:chat:c1"
