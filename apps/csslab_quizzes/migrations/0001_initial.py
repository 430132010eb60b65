from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Question",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("question_text", models.TextField()),
                ("question_text_uk", models.TextField(blank=True, null=True)),
                ("code_snippet", models.TextField(blank=True, null=True)),
                ("answers", models.JSONField(default=list)),
                ("answers_uk", models.JSONField(blank=True, null=True)),
                ("correct_answer_index", models.PositiveIntegerField()),
                ("explanation", models.TextField(blank=True, null=True)),
                ("explanation_uk", models.TextField(blank=True, null=True)),
                (
                    "category",
                    models.CharField(
                        choices=[("css", "CSS"), ("scss", "SCSS"), ("stylus", "Stylus")],
                        default="css",
                        max_length=16,
                    ),
                ),
                (
                    "difficulty",
                    models.CharField(
                        choices=[("easy", "Easy"), ("medium", "Medium"), ("hard", "Hard")],
                        default="medium",
                        max_length=16,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["category"], name="quiz_question_category_idx"),
                    models.Index(fields=["difficulty"], name="quiz_question_difficulty_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizSettings",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "questions_per_test",
                    models.PositiveIntegerField(
                        default=20,
                        validators=[
                            django.core.validators.MinValueValidator(5),
                            django.core.validators.MaxValueValidator(100),
                        ],
                    ),
                ),
                (
                    "time_per_question",
                    models.PositiveIntegerField(
                        default=60,
                        validators=[
                            django.core.validators.MinValueValidator(10),
                            django.core.validators.MaxValueValidator(300),
                        ],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name_plural": "quiz settings",
            },
        ),
        migrations.CreateModel(
            name="QuizAttempt",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("ip_address", models.CharField(blank=True, max_length=64, null=True)),
                ("attempt_date", models.DateField()),
                ("attempts_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quiz_attempts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(user__isnull=False),
                        fields=("user", "attempt_date"),
                        name="quiz_attempt_unique_user_day",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(user__isnull=True),
                        fields=("ip_address", "attempt_date"),
                        name="quiz_attempt_unique_ip_day",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="QuizResult",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("username", models.CharField(blank=True, max_length=255)),
                (
                    "category",
                    models.CharField(
                        choices=[("css", "CSS"), ("scss", "SCSS"), ("stylus", "Stylus"), ("mix", "Mix")],
                        max_length=16,
                    ),
                ),
                ("score", models.PositiveIntegerField()),
                ("total_questions", models.PositiveIntegerField()),
                ("time_taken", models.PositiveIntegerField()),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "user",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="quiz_results",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["category"], name="quiz_result_category_idx"),
                    models.Index(fields=["-score", "time_taken", "-created_at"], name="quiz_result_ranking_idx"),
                ],
            },
        ),
    ]
