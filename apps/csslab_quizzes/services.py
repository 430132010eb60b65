# apps/csslab_quizzes/services.py
from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime, timezone as dt_timezone
from typing import Any, Callable, Dict, List, Optional, Sequence

from django.apps import apps
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from apps.csslab_common.utils import LANG_EN

from .cache import BaseActiveTestCache, build_active_test_cache, compute_ttl, make_cache_key
from .exceptions import (
    AnswerIndexOutOfRange,
    InvalidCategory,
    NoContent,
    QuestionNotFound,
    QuestionsNotFound,
    RateLimited,
    SettingsNotFound,
)
from .identity import AuthenticatedIdentity, Identity
from .leaderboard import build_leaderboard
from .limiter import AttemptLimiter, LimitStatus
from .localizer import project
from .models import Question, QuizResult, QuizSettings, ResultCategory
from .selectors import get_settings, pick_random_questions

logger = logging.getLogger(__name__)

User = get_user_model()

LEADERBOARD_ALL = "all"
DEFAULT_LEADERBOARD_LIMIT = 10
MY_RESULTS_LIMIT = 50

GUEST_NAME = "Guest"
ANONYMOUS_NAME = "Anonymous"


def validate_result_category(category: str) -> str:
    if category not in ResultCategory.values:
        raise InvalidCategory(category)
    return category


def _as_uuid(value) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class QuizEngine:
    """
    테스트 생성 / 채점 / 리더보드.

    한도 카운터와 진행 중 테스트 캐시는 생성자에서 주입받는다.
    (테스트는 독립 인스턴스, 운영은 apps.py 에서 만든 인스턴스 하나를 공유)
    """

    def __init__(
        self,
        limiter: AttemptLimiter | None = None,
        cache: BaseActiveTestCache | None = None,
        rng: random.Random | None = None,
        clock: Callable[[], datetime] = timezone.now,
        min_ttl: int | None = None,
        leaderboard_max: int | None = None,
    ):
        self.limiter = limiter if limiter is not None else AttemptLimiter(clock=clock)
        # 빈 InMemory 캐시는 len()==0 이라 falsy
        self.cache = cache if cache is not None else build_active_test_cache()
        self.rng = rng
        self.min_ttl = min_ttl if min_ttl is not None else getattr(settings, "QUIZ_ACTIVE_TEST_MIN_TTL", 300)
        self.leaderboard_max = (
            leaderboard_max if leaderboard_max is not None
            else getattr(settings, "QUIZ_LEADERBOARD_MAX", 100)
        )

    #
    # 1. 한도 조회
    #

    def check_limit(self, identity: Identity) -> LimitStatus:
        return self.limiter.check_limit(identity)

    #
    # 2. 테스트 생성
    #

    def generate_test(self, category: str, language: str, identity: Identity) -> Dict[str, Any]:
        """
        캐시 hit 이면 같은 payload 를 그대로 (한도 소모 없음).
        miss 면 한도 확인 → 문항 추첨 → 카운트 증가 → 정답 제거 → 캐시 저장.
        """
        validate_result_category(category)
        key = make_cache_key(identity, category, language)

        def _generate(now: float):
            status = self.limiter.check_limit(identity)
            if not status.allowed:
                logger.info("[QuizEngine] limit reached %s limit=%s", identity.key, status.limit)
                raise RateLimited(status.limit, status.reset_at)

            quiz_settings = get_settings()
            questions_per_test = (
                quiz_settings.questions_per_test if quiz_settings
                else QuizSettings.DEFAULT_QUESTIONS_PER_TEST
            )
            time_per_question = (
                quiz_settings.time_per_question if quiz_settings
                else QuizSettings.DEFAULT_TIME_PER_QUESTION
            )

            questions = pick_random_questions(category, language, questions_per_test, rng=self.rng)
            if not questions:
                raise NoContent(category, language)

            self.limiter.increment(identity)

            total_questions = len(questions)
            ttl = compute_ttl(time_per_question, total_questions, questions_per_test, self.min_ttl)
            payload = {
                "questions": [project(q, language, include_answer_key=False) for q in questions],
                "time_per_question": time_per_question,
                "total_questions": total_questions,
                "expires_at": datetime.fromtimestamp(now + ttl, tz=dt_timezone.utc).isoformat(),
            }
            return payload, ttl

        payload, created = self.cache.get_or_create(key, _generate)
        if created:
            logger.info("[QuizEngine] generated test %s (%d questions)", key, payload["total_questions"])
        else:
            logger.debug("[QuizEngine] active test cache hit %s", key)
        return payload

    #
    # 3. 채점
    #

    def _resolve_display_name(self, identity: Identity, display_name: str | None) -> str:
        if isinstance(identity, AuthenticatedIdentity):
            user = User.objects.select_related("profile").filter(pk=identity.user_id).first()
            profile = getattr(user, "profile", None) if user else None
            return (
                getattr(profile, "display_name", "")
                or getattr(user, "email", "")
                or getattr(user, "username", "")
                or ANONYMOUS_NAME
            )
        return (display_name or "").strip() or GUEST_NAME

    def submit_test(
        self,
        identity: Identity,
        category: str,
        answers: Sequence[Dict[str, Any]],
        time_taken: int,
        display_name: str | None = None,
        language: str = LANG_EN,
    ) -> Dict[str, Any]:
        """
        answers: [{"question_id": ..., "answer_index": int}, ...]
        반환: {"result": QuizResult, "detailed_results": [...]}
        """
        validate_result_category(category)

        wanted = [_as_uuid(a["question_id"]) for a in answers]
        questions = Question.objects.in_bulk([qid for qid in wanted if qid is not None])
        if len(questions) != len(answers):
            logger.info(
                "[QuizEngine] submit rejected %s: %d answers, %d questions found",
                identity.key, len(answers), len(questions),
            )
            raise QuestionsNotFound(submitted=len(answers), found=len(questions))

        score = 0
        detailed_results: List[Dict[str, Any]] = []
        for qid, answer in zip(wanted, answers):
            question = questions[qid]
            answer_index = answer["answer_index"]
            is_correct = question.correct_answer_index == answer_index
            if is_correct:
                score += 1
            localized = project(question, language, include_answer_key=True)
            detailed_results.append(
                {
                    "question_id": localized["id"],
                    "question_text": localized["question_text"],
                    "code_snippet": localized["code_snippet"],
                    "answers": localized["answers"],
                    "user_answer": answer_index,
                    "correct_answer": localized["correct_answer_index"],
                    "is_correct": is_correct,
                    "explanation": localized["explanation"],
                }
            )

        result = QuizResult.objects.create(
            user_id=identity.user_id if isinstance(identity, AuthenticatedIdentity) else None,
            username=self._resolve_display_name(identity, display_name),
            category=category,
            score=score,
            total_questions=len(answers),
            time_taken=time_taken,
        )
        logger.info(
            "[QuizEngine] result saved id=%s %s %s %d/%d",
            result.pk, identity.key, category, score, len(answers),
        )

        self.cache.invalidate(make_cache_key(identity, category, language))
        return {"result": result, "detailed_results": detailed_results}

    #
    # 4. 기록 / 리더보드
    #

    def my_results(self, user_id) -> List[QuizResult]:
        return list(QuizResult.objects.filter(user_id=user_id).order_by("-created_at", "-id")[:MY_RESULTS_LIMIT])

    def list_leaderboard(self, category: str = LEADERBOARD_ALL, limit: int | None = None) -> List[Dict[str, Any]]:
        if category != LEADERBOARD_ALL:
            validate_result_category(category)
        if not limit or limit < 1:
            limit = DEFAULT_LEADERBOARD_LIMIT
        limit = min(limit, self.leaderboard_max)

        qs = QuizResult.objects.select_related("user", "user__profile").order_by(
            "-score", "time_taken", "-created_at", "-id"
        )
        if category != LEADERBOARD_ALL:
            qs = qs.filter(category=category)
        return build_leaderboard(qs.iterator(chunk_size=500), limit)


def get_engine() -> QuizEngine:
    """apps.py 의 ready() 에서 만든 프로세스 공용 엔진"""
    return apps.get_app_config("csslab_quizzes").engine


#
# 5. 관리자: 문항 / 설정
#


def _check_answer_index(answers: Sequence, index: int) -> None:
    if index is not None and index >= len(answers or []):
        raise AnswerIndexOutOfRange(index, len(answers or []))


def list_questions(language: str) -> List[Dict[str, Any]]:
    return [project(q, language, include_answer_key=True) for q in Question.objects.order_by("-created_at")]


def create_question(data: Dict[str, Any], language: str) -> Dict[str, Any]:
    _check_answer_index(data.get("answers"), data.get("correct_answer_index"))
    question = Question.objects.create(**data)
    logger.info("[Questions] created id=%s category=%s", question.pk, question.category)
    return project(question, language, include_answer_key=True)


@transaction.atomic
def update_question(question_id, data: Dict[str, Any], language: str) -> Dict[str, Any]:
    question = Question.objects.select_for_update().filter(pk=question_id).first()
    if question is None:
        raise QuestionNotFound(question_id)

    # 정답 인덱스만 바뀌어도 기존 보기 개수 기준으로 검사
    answers = data.get("answers", question.answers)
    index = data.get("correct_answer_index", question.correct_answer_index)
    _check_answer_index(answers, index)

    for field, value in data.items():
        setattr(question, field, value)
    question.save()
    logger.info("[Questions] updated id=%s fields=%s", question.pk, sorted(data))
    return project(question, language, include_answer_key=True)


def delete_question(question_id) -> None:
    deleted, _ = Question.objects.filter(pk=question_id).delete()
    if not deleted:
        raise QuestionNotFound(question_id)
    logger.info("[Questions] deleted id=%s", question_id)


def get_quiz_settings() -> QuizSettings:
    quiz_settings = get_settings()
    if quiz_settings is None:
        raise SettingsNotFound()
    return quiz_settings


@transaction.atomic
def update_quiz_settings(data: Dict[str, Any]) -> QuizSettings:
    """단일 row upsert"""
    quiz_settings = QuizSettings.objects.select_for_update().order_by("-created_at").first()
    if quiz_settings is None:
        quiz_settings = QuizSettings.objects.create(**data)
    else:
        for field, value in data.items():
            setattr(quiz_settings, field, value)
        quiz_settings.save()
    logger.info(
        "[QuizSettings] %s questions x %ss",
        quiz_settings.questions_per_test, quiz_settings.time_per_question,
    )
    return quiz_settings
