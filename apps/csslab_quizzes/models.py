import uuid

from django.conf import settings
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models


class QuizCategory(models.TextChoices):
    CSS    = "css", "CSS"
    SCSS   = "scss", "SCSS"
    STYLUS = "stylus", "Stylus"


class ResultCategory(models.TextChoices):
    CSS    = "css", "CSS"
    SCSS   = "scss", "SCSS"
    STYLUS = "stylus", "Stylus"
    MIX    = "mix", "Mix"


class Difficulty(models.TextChoices):
    EASY   = "easy", "Easy"
    MEDIUM = "medium", "Medium"
    HARD   = "hard", "Hard"


class Question(models.Model):
    id                   = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    question_text        = models.TextField()
    question_text_uk     = models.TextField(null=True, blank=True)
    code_snippet         = models.TextField(null=True, blank=True)
    answers              = models.JSONField(default=list)
    answers_uk           = models.JSONField(null=True, blank=True)
    # answers 범위 검사는 작성 시점(serializer/service)에서 한다
    correct_answer_index = models.PositiveIntegerField()
    explanation          = models.TextField(null=True, blank=True)
    explanation_uk       = models.TextField(null=True, blank=True)
    category             = models.CharField(max_length=16, choices=QuizCategory.choices, default=QuizCategory.CSS)
    difficulty           = models.CharField(max_length=16, choices=Difficulty.choices, default=Difficulty.MEDIUM)
    created_at           = models.DateTimeField(auto_now_add=True)
    updated_at           = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["category"], name="quiz_question_category_idx"),
            models.Index(fields=["difficulty"], name="quiz_question_difficulty_idx"),
        ]

    def __str__(self) -> str:
        return f"[{self.category}/{self.difficulty}] {self.question_text[:40]}"


class QuizSettings(models.Model):
    """테스트 생성 설정 (단일 row)"""
    DEFAULT_QUESTIONS_PER_TEST = 20
    DEFAULT_TIME_PER_QUESTION = 60

    questions_per_test = models.PositiveIntegerField(
        default=DEFAULT_QUESTIONS_PER_TEST,
        validators=[MinValueValidator(5), MaxValueValidator(100)],
    )
    # 문항당 제한 시간(초)
    time_per_question = models.PositiveIntegerField(
        default=DEFAULT_TIME_PER_QUESTION,
        validators=[MinValueValidator(10), MaxValueValidator(300)],
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "quiz settings"

    def __str__(self) -> str:
        return f"{self.questions_per_test} questions x {self.time_per_question}s"


class QuizAttempt(models.Model):
    """
    일단위 테스트 생성 횟수.
    로그인 유저는 user, 익명은 ip_address 로 구분 (둘 중 하나만 채움).
    """
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="quiz_attempts",
    )
    ip_address     = models.CharField(max_length=64, null=True, blank=True)
    attempt_date   = models.DateField()
    attempts_count = models.PositiveIntegerField(default=0)
    created_at     = models.DateTimeField(auto_now_add=True)
    updated_at     = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "attempt_date"],
                condition=models.Q(user__isnull=False),
                name="quiz_attempt_unique_user_day",
            ),
            models.UniqueConstraint(
                fields=["ip_address", "attempt_date"],
                condition=models.Q(user__isnull=True),
                name="quiz_attempt_unique_ip_day",
            ),
        ]

    def __str__(self) -> str:
        who = f"user={self.user_id}" if self.user_id else f"ip={self.ip_address}"
        return f"{who} {self.attempt_date}={self.attempts_count}"


class QuizResult(models.Model):
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="quiz_results",
    )
    username        = models.CharField(max_length=255, blank=True)
    category        = models.CharField(max_length=16, choices=ResultCategory.choices)
    score           = models.PositiveIntegerField()
    total_questions = models.PositiveIntegerField()
    # 소요 시간(초)
    time_taken      = models.PositiveIntegerField()
    created_at      = models.DateTimeField(auto_now_add=True)

    class Meta:
        indexes = [
            models.Index(fields=["category"], name="quiz_result_category_idx"),
            models.Index(fields=["-score", "time_taken", "-created_at"], name="quiz_result_ranking_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.username} {self.category} {self.score}/{self.total_questions}"
