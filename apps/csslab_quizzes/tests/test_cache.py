import threading
import time

import pytest
from django.core.cache import cache as django_cache

from apps.csslab_quizzes.cache import (
    DjangoActiveTestCache,
    InMemoryActiveTestCache,
    build_active_test_cache,
    compute_ttl,
    make_cache_key,
)
from apps.csslab_quizzes.identity import AnonymousIdentity, AuthenticatedIdentity


def test_cache_key_has_three_parts():
    assert make_cache_key(AuthenticatedIdentity(user_id=7), "css", "en") == "user:7|css|en"
    assert make_cache_key(AnonymousIdentity(ip="1.2.3.4"), "mix", "uk") == "ip:1.2.3.4|mix|uk"
    assert make_cache_key(AnonymousIdentity(ip=None), "scss", "en") == "ip:unknown|scss|en"


def test_ttl_uses_larger_question_count_and_five_minute_floor():
    assert compute_ttl(60, 5, 20) == 1200
    assert compute_ttl(60, 30, 20) == 1800
    assert compute_ttl(10, 3, 5) == 300


def test_entries_expire_passively(clock):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)
    cache.put("a", {"questions": [1]}, ttl_seconds=300)
    cache.put("b", {"questions": [2]}, ttl_seconds=600)
    assert len(cache) == 2

    clock.advance(seconds=301)
    assert cache.get("a") is None
    assert cache.get("b") == {"questions": [2]}
    assert len(cache) == 1


def test_invalidate_removes_entry(clock):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)
    cache.put("k", {"questions": []}, ttl_seconds=300)
    cache.invalidate("k")
    assert cache.get("k") is None
    cache.invalidate("missing")


def test_returned_payload_is_a_copy(clock):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)
    cache.put("k", {"questions": [{"id": "1"}]}, ttl_seconds=300)
    got = cache.get("k")
    got["questions"].append({"id": "2"})
    assert cache.get("k") == {"questions": [{"id": "1"}]}


def test_get_or_create_runs_factory_once(clock):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)
    calls = []

    def factory(now):
        calls.append(now)
        return {"questions": ["q"]}, 300

    first, created = cache.get_or_create("k", factory)
    second, created_again = cache.get_or_create("k", factory)
    assert created is True
    assert created_again is False
    assert first == second
    assert calls == [clock.timestamp()]


def test_failed_factory_stores_nothing(clock):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)

    def factory(now):
        raise RuntimeError("store down")

    with pytest.raises(RuntimeError):
        cache.get_or_create("k", factory)
    assert cache.get("k") is None


def test_concurrent_get_or_create_yields_single_entry():
    cache = InMemoryActiveTestCache()
    barrier = threading.Barrier(8)
    calls = []
    results = []

    def factory(now):
        calls.append(1)
        time.sleep(0.05)
        return {"questions": [len(calls)]}, 300

    def worker():
        barrier.wait()
        payload, _ = cache.get_or_create("same-key", factory)
        results.append(payload)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(calls) == 1
    assert all(r == results[0] for r in results)


def test_django_backend_roundtrip_and_first_writer_wins():
    django_cache.clear()
    cache = DjangoActiveTestCache()
    stored = cache.put("k", {"questions": [1]}, ttl_seconds=300)
    assert stored == {"questions": [1]}

    # 다른 인스턴스가 먼저 만든 항목이 있으면 그걸 돌려준다
    again = cache.put("k", {"questions": [2]}, ttl_seconds=300)
    assert again == {"questions": [1]}
    assert cache.get("k") == {"questions": [1]}

    cache.invalidate("k")
    assert cache.get("k") is None


def test_backend_selection(settings):
    settings.QUIZ_ACTIVE_TEST_BACKEND = "django"
    assert isinstance(build_active_test_cache(), DjangoActiveTestCache)
    assert isinstance(build_active_test_cache("memory"), InMemoryActiveTestCache)


def test_entry_expires_at_time_reported_to_factory(clock):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)
    seen = {}

    def factory(now):
        seen["expires_at"] = now + 300
        return {"questions": [1]}, 300

    cache.get_or_create("k", factory)
    clock.advance(seconds=299)
    assert cache.get("k") is not None
    clock.advance(seconds=1)
    assert clock.timestamp() == seen["expires_at"]
    assert cache.get("k") is None
