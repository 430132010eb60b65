from django.apps import AppConfig


class CsslabQuizzesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.csslab_quizzes"
    verbose_name = "CSS Lab Quizzes"

    engine = None

    def ready(self):
        # 진행 중 테스트 캐시는 프로세스당 하나
        from .services import QuizEngine

        self.engine = QuizEngine()
