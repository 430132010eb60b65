# apps/csslab_quizzes/urls.py
from django.urls import path

from .views import (
    CheckLimitView,
    GenerateTestView,
    LeaderboardView,
    MyResultsView,
    QuestionDetailView,
    QuestionListView,
    QuizSettingsView,
    SubmitTestView,
)

app_name = "csslab_quizzes"

urlpatterns = [
    # 관리자
    path("questions/", QuestionListView.as_view(), name="question-list"),
    path("questions/<uuid:question_id>/", QuestionDetailView.as_view(), name="question-detail"),
    path("settings/", QuizSettingsView.as_view(), name="settings"),

    # 응시
    path("check-limit/", CheckLimitView.as_view(), name="check-limit"),
    path("test/", GenerateTestView.as_view(), name="test"),
    path("submit/", SubmitTestView.as_view(), name="submit"),
    path("my-results/", MyResultsView.as_view(), name="my-results"),
    path("leaderboard/", LeaderboardView.as_view(), name="leaderboard"),
]
