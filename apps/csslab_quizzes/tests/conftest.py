import random
from datetime import datetime, timedelta, timezone

import pytest
from django.apps import apps
from django.contrib.auth import get_user_model

from apps.csslab_quizzes.cache import InMemoryActiveTestCache
from apps.csslab_quizzes.limiter import AttemptLimiter
from apps.csslab_quizzes.models import Question, QuizSettings
from apps.csslab_quizzes.services import QuizEngine

User = get_user_model()


class FakeClock:
    """엔진(datetime) / 캐시(epoch float) 가 같은 시간을 보게 하는 테스트용 시계"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def timestamp(self) -> float:
        return self.now.timestamp()

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def limiter(clock):
    return AttemptLimiter(anonymous_limit=3, free_limit=5, clock=clock)


@pytest.fixture
def engine(clock, limiter):
    return QuizEngine(
        limiter=limiter,
        cache=InMemoryActiveTestCache(clock=clock.timestamp),
        rng=random.Random(1234),
        clock=clock,
        min_ttl=300,
        leaderboard_max=100,
    )


@pytest.fixture
def fresh_engine(monkeypatch):
    """API 테스트용: 프로세스 공용 엔진을 테스트마다 새로 만든다"""
    engine = QuizEngine(cache=InMemoryActiveTestCache())
    monkeypatch.setattr(apps.get_app_config("csslab_quizzes"), "engine", engine)
    return engine


@pytest.fixture
def quiz_settings(db):
    return QuizSettings.objects.create(questions_per_test=5, time_per_question=30)


@pytest.fixture
def make_question(db):
    counter = {"n": 0}

    def _make(category="css", correct=0, uk=True, **overrides):
        counter["n"] += 1
        n = counter["n"]
        data = {
            "question_text": f"English question number {n}?",
            "answers": [f"a{n}", f"b{n}", f"c{n}", f"d{n}"],
            "correct_answer_index": correct,
            "explanation": f"explanation {n}",
            "category": category,
            "difficulty": "easy",
        }
        if uk:
            data.update(
                {
                    "question_text_uk": f"Питання номер {n}?",
                    "answers_uk": [f"а{n}", f"б{n}", f"в{n}", f"г{n}"],
                    "explanation_uk": f"пояснення {n}",
                }
            )
        data.update(overrides)
        return Question.objects.create(**data)

    return _make


@pytest.fixture
def make_user(db):
    def _make(username="player", email=None, tier="free", display_name="", is_staff=False):
        user = User.objects.create_user(
            username=username,
            email=email if email is not None else f"{username}@example.com",
            password="pass12345",
            is_staff=is_staff,
        )
        profile = user.profile
        profile.subscription_tier = tier
        profile.display_name = display_name
        profile.save()
        return user

    return _make
