# apps/csslab_quizzes/limiter.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from typing import Callable

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from apps.csslab_accounts.models import SubscriptionTier

from .exceptions import RateLimited
from .identity import ANONYMOUS_TIER, AuthenticatedIdentity, Identity
from .models import QuizAttempt

logger = logging.getLogger(__name__)

# 무제한 표시용
UNLIMITED = -1


@dataclass
class LimitStatus:
    allowed: bool
    remaining: int  # -1 = 무제한
    limit: int      # -1 = 무제한
    reset_at: datetime

    def to_dict(self) -> dict:
        return {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "limit": self.limit,
            "reset_at": self.reset_at.isoformat(),
        }


def next_utc_midnight(now: datetime) -> datetime:
    today = now.astimezone(dt_timezone.utc).date()
    return datetime.combine(today + timedelta(days=1), time.min, tzinfo=dt_timezone.utc)


class AttemptLimiter:
    """
    identity + UTC 날짜 단위 고정 윈도우 카운터.

    - 익명(IP): QUIZ_ANONYMOUS_DAILY_LIMIT (기본 3)
    - free: QUIZ_FREE_DAILY_LIMIT (기본 5)
    - pro / premium: 카운터를 아예 건드리지 않음
    날짜가 바뀌면 키가 달라지므로 별도 리셋 작업은 없다.
    """

    def __init__(
        self,
        anonymous_limit: int | None = None,
        free_limit: int | None = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.anonymous_limit = (
            anonymous_limit if anonymous_limit is not None
            else getattr(settings, "QUIZ_ANONYMOUS_DAILY_LIMIT", 3)
        )
        self.free_limit = (
            free_limit if free_limit is not None
            else getattr(settings, "QUIZ_FREE_DAILY_LIMIT", 5)
        )
        self.clock = clock

    def limit_for(self, identity: Identity) -> int:
        if identity.is_unlimited:
            return UNLIMITED
        if identity.tier == ANONYMOUS_TIER:
            return self.anonymous_limit
        if identity.tier == SubscriptionTier.FREE:
            return self.free_limit
        # 알 수 없는 등급은 free 취급
        return self.free_limit

    def _today(self) -> date:
        return self.clock().astimezone(dt_timezone.utc).date()

    def _lookup(self, identity: Identity, day: date) -> dict:
        if isinstance(identity, AuthenticatedIdentity):
            return {"user_id": identity.user_id, "attempt_date": day}
        return {"user__isnull": True, "ip_address": identity.normalized_ip, "attempt_date": day}

    def _defaults(self, identity: Identity) -> dict:
        if isinstance(identity, AuthenticatedIdentity):
            return {"attempts_count": 0}
        return {"attempts_count": 0, "user": None}

    def used_today(self, identity: Identity) -> int:
        attempt = QuizAttempt.objects.filter(**self._lookup(identity, self._today())).first()
        return attempt.attempts_count if attempt else 0

    def check_limit(self, identity: Identity) -> LimitStatus:
        """단순 조회용: 오늘 남은 횟수"""
        now = self.clock()
        reset_at = next_utc_midnight(now)
        limit = self.limit_for(identity)
        if limit == UNLIMITED:
            return LimitStatus(allowed=True, remaining=UNLIMITED, limit=UNLIMITED, reset_at=reset_at)

        used = self.used_today(identity)
        return LimitStatus(
            allowed=used < limit,
            remaining=max(limit - used, 0),
            limit=limit,
            reset_at=reset_at,
        )

    @transaction.atomic
    def increment(self, identity: Identity) -> int:
        """
        테스트 생성 성공 후에만 호출. 오늘 카운트를 1 올리고 새 값을 반환.
        무제한 등급은 기록하지 않는다.
        check_limit 이후 다른 요청이 먼저 소모했으면 row lock 안에서 RateLimited.
        """
        limit = self.limit_for(identity)
        if limit == UNLIMITED:
            return 0

        attempt, _ = QuizAttempt.objects.select_for_update().get_or_create(
            **self._lookup(identity, self._today()),
            defaults=self._defaults(identity),
        )
        if attempt.attempts_count >= limit:
            raise RateLimited(limit, next_utc_midnight(self.clock()))

        attempt.attempts_count += 1
        attempt.save(update_fields=["attempts_count", "updated_at"])
        logger.debug("[AttemptLimiter] %s count=%s", identity.key, attempt.attempts_count)
        return attempt.attempts_count
