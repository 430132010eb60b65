# apps/csslab_quizzes/cache.py
"""
진행 중 테스트 캐시.

같은 identity/category/language 로 "테스트 시작"을 여러 번 눌러도
같은 문항 세트를 돌려주고 한도를 다시 깎지 않기 위한 용도.
채점에는 절대 쓰지 않는다.

- InMemoryActiveTestCache: 프로세스 로컬 dict (기본값)
- DjangoActiveTestCache: django.core.cache 백엔드 (Redis 등 공유 캐시)
"""
from __future__ import annotations

import copy
import logging
import threading
import time
import zlib
from typing import Any, Callable, Dict, Optional, Tuple

from django.conf import settings

from .identity import Identity

logger = logging.getLogger(__name__)

DEFAULT_MIN_TTL_SECONDS = 5 * 60
KEY_PREFIX = "quiz:active"
LOCK_STRIPES = 64

Payload = Dict[str, Any]
Factory = Callable[[float], Tuple[Payload, float]]


def make_cache_key(identity: Identity, category: str, language: str) -> str:
    return f"{identity.key}|{category}|{language}"


def compute_ttl(
    time_per_question: int,
    total_questions: int,
    questions_per_test: int,
    min_ttl: float = DEFAULT_MIN_TTL_SECONDS,
) -> float:
    """문항당 시간 x max(실제 문항 수, 설정 문항 수), 최소 5분"""
    return max(float(time_per_question * max(total_questions, questions_per_test)), float(min_ttl))


class BaseActiveTestCache:
    """
    get / put / invalidate 는 백엔드별로 구현.
    get_or_create 는 키 단위 락으로 생성을 직렬화해서
    같은 키에 대한 동시 요청 중 두 번째는 첫 번째 결과를 보게 한다.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._locks = [threading.Lock() for _ in range(LOCK_STRIPES)]

    def _lock_for(self, key: str) -> threading.Lock:
        return self._locks[zlib.crc32(key.encode("utf-8")) % LOCK_STRIPES]

    def get(self, key: str) -> Optional[Payload]:
        raise NotImplementedError

    def put(self, key: str, payload: Payload, ttl_seconds: float, now: float | None = None) -> Payload:
        raise NotImplementedError

    def invalidate(self, key: str) -> None:
        raise NotImplementedError

    def get_or_create(self, key: str, factory: Factory) -> Tuple[Payload, bool]:
        """
        (payload, created) 반환.
        factory(now) 는 (payload, ttl_seconds) 를 돌려주고, 예외가 나면 아무것도 저장하지 않는다.
        now 는 캐시 시계 기준이며 저장 만료 시각도 같은 now 로 계산한다.
        """
        cached = self.get(key)
        if cached is not None:
            return cached, False

        with self._lock_for(key):
            cached = self.get(key)
            if cached is not None:
                return cached, False
            now = self.clock()
            payload, ttl_seconds = factory(now)
            return self.put(key, payload, ttl_seconds, now=now), True


class InMemoryActiveTestCache(BaseActiveTestCache):
    """
    프로세스 로컬 캐시.
    타이머 스레드 없이 접근할 때마다 만료 항목을 먼저 쓸어낸다.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__(clock=clock)
        self._entries: Dict[str, Tuple[float, Payload]] = {}
        self._mutex = threading.Lock()

    def _sweep(self, now: float) -> None:
        expired = [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("[ActiveTestCache] swept %d expired entries", len(expired))

    def get(self, key: str) -> Optional[Payload]:
        now = self.clock()
        with self._mutex:
            self._sweep(now)
            entry = self._entries.get(key)
            if entry is None:
                return None
            return copy.deepcopy(entry[1])

    def put(self, key: str, payload: Payload, ttl_seconds: float, now: float | None = None) -> Payload:
        now = self.clock() if now is None else now
        with self._mutex:
            self._sweep(now)
            self._entries[key] = (now + ttl_seconds, copy.deepcopy(payload))
        return copy.deepcopy(payload)

    def invalidate(self, key: str) -> None:
        with self._mutex:
            self._sweep(self.clock())
            self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._mutex:
            self._sweep(self.clock())
            return len(self._entries)


class DjangoActiveTestCache(BaseActiveTestCache):
    """
    Django cache framework 위에 얹은 버전. 만료는 백엔드 TTL 에 맡긴다.
    여러 인스턴스가 같은 키를 동시에 만들면 cache.add 로 먼저 쓴 쪽을 채택한다.
    """

    def __init__(self, alias: str = "default", clock: Callable[[], float] = time.time):
        super().__init__(clock=clock)
        self.alias = alias

    @property
    def _cache(self):
        from django.core.cache import caches
        return caches[self.alias]

    def _k(self, key: str) -> str:
        return f"{KEY_PREFIX}:{key}"

    def get(self, key: str) -> Optional[Payload]:
        return self._cache.get(self._k(key))

    def put(self, key: str, payload: Payload, ttl_seconds: float, now: float | None = None) -> Payload:
        timeout = max(int(ttl_seconds), 1)
        if self._cache.add(self._k(key), payload, timeout=timeout):
            return payload
        existing = self._cache.get(self._k(key))
        if existing is None:
            # add 실패 직후 만료된 경우
            self._cache.set(self._k(key), payload, timeout=timeout)
            return payload
        logger.info("[ActiveTestCache] %s already created by another instance", key)
        return existing

    def invalidate(self, key: str) -> None:
        self._cache.delete(self._k(key))


def build_active_test_cache(backend: str | None = None) -> BaseActiveTestCache:
    backend = backend or getattr(settings, "QUIZ_ACTIVE_TEST_BACKEND", "memory")
    if backend == "django":
        return DjangoActiveTestCache()
    if backend != "memory":
        logger.warning("[ActiveTestCache] unknown backend %r, falling back to memory", backend)
    return InMemoryActiveTestCache()
