# apps/csslab_quizzes/identity.py
"""
한도/캐시 키로 쓰는 요청자 식별자.

로그인 유저는 user id(+ 구독 등급), 익명은 정규화된 IP.
뷰에서 요청마다 한 번만 resolve_identity() 로 만들고 값으로 넘긴다.
"""
from __future__ import annotations

from dataclasses import dataclass

from apps.csslab_accounts.models import SubscriptionTier, UNLIMITED_TIERS, get_tier
from apps.csslab_common.utils import UNKNOWN_IP, get_client_ip

ANONYMOUS_TIER = "anonymous"


@dataclass(frozen=True)
class AuthenticatedIdentity:
    user_id: int
    tier: str = SubscriptionTier.FREE

    @property
    def key(self) -> str:
        return f"user:{self.user_id}"

    @property
    def is_unlimited(self) -> bool:
        return self.tier in UNLIMITED_TIERS


@dataclass(frozen=True)
class AnonymousIdentity:
    ip: str | None = None
    tier: str = ANONYMOUS_TIER

    @property
    def normalized_ip(self) -> str:
        return (self.ip or "").strip() or UNKNOWN_IP

    @property
    def key(self) -> str:
        return f"ip:{self.normalized_ip}"

    @property
    def is_unlimited(self) -> bool:
        return False


Identity = AuthenticatedIdentity | AnonymousIdentity


def resolve_identity(request) -> Identity:
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        return AuthenticatedIdentity(user_id=user.pk, tier=get_tier(user))
    return AnonymousIdentity(ip=get_client_ip(request))
