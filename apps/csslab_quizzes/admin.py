from django.contrib import admin
from .models import Question, QuizSettings, QuizAttempt, QuizResult

@admin.register(Question)
class QuestionAdmin(admin.ModelAdmin):
    list_display = ("id", "category", "difficulty", "question_text", "has_uk")
    list_filter = ("category", "difficulty")
    search_fields = ("question_text", "question_text_uk")

    @admin.display(boolean=True, description="uk")
    def has_uk(self, obj):
        return bool(obj.question_text_uk and obj.answers_uk)

@admin.register(QuizSettings)
class QuizSettingsAdmin(admin.ModelAdmin):
    list_display = ("id", "questions_per_test", "time_per_question", "updated_at")

@admin.register(QuizAttempt)
class QuizAttemptAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "ip_address", "attempt_date", "attempts_count")
    list_filter = ("attempt_date",)
    search_fields = ("ip_address", "user__username", "user__email")

@admin.register(QuizResult)
class QuizResultAdmin(admin.ModelAdmin):
    list_display = ("id", "username", "category", "score", "total_questions", "time_taken", "created_at")
    list_filter = ("category",)
    search_fields = ("username", "user__email")
