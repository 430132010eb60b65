import uuid
from datetime import datetime, timedelta, timezone

import pytest

from apps.csslab_quizzes.cache import InMemoryActiveTestCache
from apps.csslab_quizzes.exceptions import InvalidCategory, NoContent, QuestionsNotFound, RateLimited
from apps.csslab_quizzes.identity import AnonymousIdentity, AuthenticatedIdentity
from apps.csslab_quizzes.models import QuizAttempt, QuizResult
from apps.csslab_quizzes.services import QuizEngine

ANON = AnonymousIdentity(ip="203.0.113.9")


def _ids(payload):
    return [q["id"] for q in payload["questions"]]


@pytest.mark.django_db
def test_generate_test_strips_answer_key(engine, quiz_settings, make_question):
    for _ in range(8):
        make_question(category="css")

    payload = engine.generate_test("css", "en", ANON)
    assert payload["total_questions"] == 5
    assert payload["time_per_question"] == 30
    assert len(set(_ids(payload))) == 5
    for q in payload["questions"]:
        assert "correct_answer_index" not in q
        assert "explanation" not in q


@pytest.mark.django_db
def test_generate_without_settings_uses_defaults(engine, make_question):
    make_question(category="css")
    payload = engine.generate_test("css", "en", ANON)
    assert payload["total_questions"] == 1
    assert payload["time_per_question"] == 60


@pytest.mark.django_db
def test_expiry_uses_ttl(engine, clock, quiz_settings, make_question):
    make_question(category="css")
    payload = engine.generate_test("css", "en", ANON)
    # 30s x max(1, 5) = 150s → 최소 5분
    expected = clock.now + timedelta(seconds=300)
    assert datetime.fromisoformat(payload["expires_at"]) == expected


@pytest.mark.django_db
def test_refetch_is_idempotent(engine, quiz_settings, make_question):
    for _ in range(10):
        make_question(category="css")

    first = engine.generate_test("css", "en", ANON)
    second = engine.generate_test("css", "en", ANON)
    assert first == second
    assert engine.limiter.used_today(ANON) == 1
    assert engine.check_limit(ANON).remaining == 2


@pytest.mark.django_db
def test_keys_differ_by_category_and_language(engine, quiz_settings, make_question):
    make_question(category="css")
    engine.generate_test("css", "en", ANON)
    engine.generate_test("css", "uk", ANON)
    engine.generate_test("mix", "en", ANON)
    assert engine.limiter.used_today(ANON) == 3


@pytest.mark.django_db
def test_submit_invalidates_active_test(engine, quiz_settings, make_question):
    questions = [make_question(category="css") for _ in range(10)]
    by_id = {str(q.id): q for q in questions}

    payload = engine.generate_test("css", "en", ANON)
    answers = [
        {"question_id": qid, "answer_index": by_id[qid].correct_answer_index}
        for qid in _ids(payload)
    ]
    engine.submit_test(ANON, "css", answers, time_taken=40)

    again = engine.generate_test("css", "en", ANON)
    assert engine.limiter.used_today(ANON) == 2
    assert again["total_questions"] == 5


@pytest.mark.django_db
def test_expired_entry_consumes_new_slot(engine, clock, quiz_settings, make_question):
    make_question(category="css")
    engine.generate_test("css", "en", ANON)
    clock.advance(seconds=301)
    engine.generate_test("css", "en", ANON)
    assert engine.limiter.used_today(ANON) == 2


@pytest.mark.django_db
def test_rate_limited_after_quota(engine, quiz_settings, make_question):
    make_question(category="css")
    for _ in range(3):
        engine.generate_test("css", "en", ANON)
        engine.cache.invalidate("ip:203.0.113.9|css|en")

    with pytest.raises(RateLimited) as exc:
        engine.generate_test("css", "en", ANON)
    assert exc.value.limit == 3
    assert exc.value.reset_at == datetime(2025, 3, 11, tzinfo=timezone.utc)
    assert engine.cache.get("ip:203.0.113.9|css|en") is None


@pytest.mark.django_db
def test_cached_test_still_served_after_quota_is_used(engine, quiz_settings, make_question):
    make_question(category="css")
    make_question(category="scss")
    make_question(category="stylus")
    engine.generate_test("css", "en", ANON)
    engine.generate_test("scss", "en", ANON)
    payload = engine.generate_test("stylus", "en", ANON)

    assert engine.generate_test("stylus", "en", ANON) == payload
    with pytest.raises(RateLimited):
        engine.generate_test("mix", "en", ANON)


@pytest.mark.django_db
def test_paid_user_is_never_limited(engine, quiz_settings, make_question, make_user):
    make_question(category="css")
    user = make_user(tier="premium")
    ident = AuthenticatedIdentity(user_id=user.pk, tier="premium")
    for _ in range(10):
        engine.generate_test("css", "en", ident)
        engine.cache.invalidate(f"user:{user.pk}|css|en")
    assert not QuizAttempt.objects.exists()


@pytest.mark.django_db
def test_no_content_has_no_side_effects(engine, quiz_settings, make_question):
    make_question(category="css", uk=False)

    with pytest.raises(NoContent):
        engine.generate_test("scss", "en", ANON)
    with pytest.raises(NoContent):
        engine.generate_test("css", "uk", ANON)

    assert engine.limiter.used_today(ANON) == 0
    assert len(engine.cache) == 0


@pytest.mark.django_db
def test_invalid_category_rejected_before_side_effects(engine, make_question):
    make_question(category="css")
    with pytest.raises(InvalidCategory):
        engine.generate_test("less", "en", ANON)
    with pytest.raises(InvalidCategory):
        engine.submit_test(ANON, "less", [], time_taken=1)
    assert engine.limiter.used_today(ANON) == 0


@pytest.mark.django_db
def test_scoring(engine, make_question):
    q1 = make_question(correct=2)
    q2 = make_question(correct=1)

    out = engine.submit_test(
        ANON,
        "css",
        [
            {"question_id": q1.id, "answer_index": 2},
            {"question_id": str(q2.id), "answer_index": 3},
        ],
        time_taken=55,
        display_name="  Ann ",
    )
    result = out["result"]
    assert result.score == 1
    assert result.total_questions == 2
    assert result.time_taken == 55
    assert result.user_id is None
    assert result.username == "Ann"

    detailed = out["detailed_results"]
    assert [d["is_correct"] for d in detailed] == [True, False]
    assert detailed[1]["user_answer"] == 3
    assert detailed[1]["correct_answer"] == 1
    assert detailed[1]["explanation"] == q2.explanation


@pytest.mark.django_db
def test_detailed_results_follow_language(engine, make_question):
    q = make_question()
    out = engine.submit_test(ANON, "css", [{"question_id": q.id, "answer_index": 0}], 10, language="uk")
    assert out["detailed_results"][0]["question_text"] == q.question_text_uk


@pytest.mark.django_db
def test_unknown_question_ids_rejected(engine, make_question):
    q = make_question()
    with pytest.raises(QuestionsNotFound):
        engine.submit_test(
            ANON,
            "css",
            [
                {"question_id": q.id, "answer_index": 0},
                {"question_id": uuid.uuid4(), "answer_index": 0},
            ],
            time_taken=10,
        )
    with pytest.raises(QuestionsNotFound):
        engine.submit_test(ANON, "css", [{"question_id": "not-a-uuid", "answer_index": 0}], 10)
    assert not QuizResult.objects.exists()


@pytest.mark.django_db
def test_duplicate_question_ids_rejected(engine, make_question):
    q = make_question()
    with pytest.raises(QuestionsNotFound):
        engine.submit_test(
            ANON,
            "css",
            [{"question_id": q.id, "answer_index": 0}, {"question_id": q.id, "answer_index": 0}],
            time_taken=10,
        )


@pytest.mark.django_db
def test_authenticated_name_wins_over_client_name(engine, make_question, make_user):
    q = make_question()
    user = make_user(username="neo", email="neo@example.com", display_name="Neo")
    ident = AuthenticatedIdentity(user_id=user.pk, tier="free")

    out = engine.submit_test(ident, "css", [{"question_id": q.id, "answer_index": 0}], 10, display_name="Trinity")
    assert out["result"].username == "Neo"
    assert out["result"].user_id == user.pk

    nameless = make_user(username="smith", email="smith@example.com")
    ident = AuthenticatedIdentity(user_id=nameless.pk, tier="free")
    out = engine.submit_test(ident, "css", [{"question_id": q.id, "answer_index": 0}], 10)
    assert out["result"].username == "smith@example.com"


@pytest.mark.django_db
def test_anonymous_without_name_is_guest(engine, make_question):
    q = make_question()
    out = engine.submit_test(ANON, "css", [{"question_id": q.id, "answer_index": 0}], 10)
    assert out["result"].username == "Guest"


@pytest.mark.django_db
def test_my_results_newest_first(engine, make_question, make_user):
    q = make_question()
    user = make_user()
    ident = AuthenticatedIdentity(user_id=user.pk)
    for t in (10, 20, 30):
        engine.submit_test(ident, "css", [{"question_id": q.id, "answer_index": 0}], t)
    engine.submit_test(ANON, "css", [{"question_id": q.id, "answer_index": 0}], 5)

    results = engine.my_results(user.pk)
    assert [r.time_taken for r in results] == [30, 20, 10]


def test_injected_components_are_kept(clock, limiter):
    cache = InMemoryActiveTestCache(clock=clock.timestamp)
    assert len(cache) == 0

    engine = QuizEngine(limiter=limiter, cache=cache, clock=clock)
    assert engine.cache is cache
    assert engine.limiter is limiter


@pytest.mark.django_db
def test_active_test_evicted_at_reported_expiry(engine, clock, quiz_settings, make_question):
    make_question(category="css")
    payload = engine.generate_test("css", "en", ANON)
    expires_at = datetime.fromisoformat(payload["expires_at"])

    clock.advance(seconds=(expires_at - clock.now).total_seconds() - 1)
    assert engine.generate_test("css", "en", ANON) == payload

    clock.now = expires_at
    assert engine.generate_test("css", "en", ANON) != payload
    assert engine.limiter.used_today(ANON) == 2
