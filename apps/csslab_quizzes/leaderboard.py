# apps/csslab_quizzes/leaderboard.py
from __future__ import annotations

import math
from typing import Any, Dict, Iterable, List

from .models import QuizResult


def normalize_identifier(value: str | None) -> str:
    return (value or "").strip().lower()


def percentage(score: int, total_questions: int) -> int:
    """JS Math.round 와 같은 반올림(0.5 는 올림)"""
    if not total_questions:
        return 0
    return int(math.floor(score / total_questions * 100 + 0.5))


def dedup_key(result: QuizResult) -> str:
    """
    한 플레이어의 여러 기록을 하나로 묶는 키 (identity, category).
    user id → username → 행 단위 guest 키 순서.
    (연결된 유저가 있으면 user id 가 항상 있으므로 이메일 단계는 user id 로 대신한다)
    """
    # 키 종류별 prefix (user: / name: / guest-)
    name = normalize_identifier(result.username)
    if result.user_id:
        identity = f"user:{result.user_id}"
    elif name:
        identity = f"name:{name}"
    else:
        identity = f"guest-{result.pk}"
    return f"{identity}:{result.category}"


def ranked_results(results: Iterable[QuizResult], limit: int) -> List[QuizResult]:
    """
    이미 score DESC, time_taken ASC, created_at DESC 로 정렬된 결과를 받아
    플레이어/카테고리별 첫 행(= 최고 기록)만 남긴다.
    """
    seen = set()
    out: List[QuizResult] = []
    for result in results:
        key = dedup_key(result)
        if key in seen:
            continue
        seen.add(key)
        out.append(result)
        if len(out) >= limit:
            break
    return out


def to_entry(rank: int, result: QuizResult) -> Dict[str, Any]:
    user = result.user if result.user_id else None
    profile = getattr(user, "profile", None) if user is not None else None
    return {
        "rank": rank,
        "username": result.username or getattr(profile, "display_name", "") or getattr(user, "email", "") or "Anonymous",
        "email": getattr(user, "email", None) or None,
        "avatar_url": profile.avatar_url if profile else None,
        "subscription_tier": getattr(profile, "subscription_tier", None) or "free",
        "score": result.score,
        "total_questions": result.total_questions,
        "percentage": percentage(result.score, result.total_questions),
        "time_taken": result.time_taken,
        "category": result.category,
        "created_at": result.created_at.isoformat() if result.created_at else None,
    }


def build_leaderboard(results: Iterable[QuizResult], limit: int) -> List[Dict[str, Any]]:
    return [to_entry(i, r) for i, r in enumerate(ranked_results(results, limit), start=1)]
