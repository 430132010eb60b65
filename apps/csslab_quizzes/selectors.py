# apps/csslab_quizzes/selectors.py
from __future__ import annotations

import random
from typing import List, Sequence, TypeVar

from apps.csslab_common.utils import LANG_UK

from .models import Question, QuizSettings, ResultCategory

__all__ = [
    "select_random_ids",
    "find_question_ids",
    "find_questions_in_order",
    "pick_random_questions",
    "get_settings",
]

T = TypeVar("T")


def select_random_ids(pool: Sequence[T], count: int, rng: random.Random | None = None) -> List[T]:
    """
    후보 id 풀에서 중복 없이 count 개 균등 추출.
    Fisher-Yates(random.shuffle) 로 id 만 섞고 앞에서 자른다.
    """
    count = min(count, len(pool))
    if count <= 0:
        return []
    ids = list(pool)
    (rng or random).shuffle(ids)
    return ids[:count]


def find_question_ids(category: str, language: str) -> List:
    """mix 는 전 카테고리, uk 는 번역이 있는 문항만"""
    qs = Question.objects.all()
    if category != ResultCategory.MIX:
        qs = qs.filter(category=category)
    if language == LANG_UK:
        qs = qs.filter(question_text_uk__isnull=False, answers_uk__isnull=False)
    return list(qs.values_list("id", flat=True))


def find_questions_in_order(ids: Sequence) -> List[Question]:
    """DB 순서가 아니라 넘겨받은 id 순서대로 돌려준다 (셔플 결과 보존)"""
    by_id = Question.objects.in_bulk(list(ids))
    return [by_id[qid] for qid in ids if qid in by_id]


def pick_random_questions(category: str, language: str, count: int, rng: random.Random | None = None) -> List[Question]:
    pool = find_question_ids(category, language)
    if not pool:
        return []
    return find_questions_in_order(select_random_ids(pool, count, rng=rng))


def get_settings() -> QuizSettings | None:
    return QuizSettings.objects.order_by("-created_at").first()
