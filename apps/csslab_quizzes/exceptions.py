from datetime import datetime


class QuizError(Exception):
    """퀴즈 엔진 공통 예외 (호출부에서 처리, 엔진은 재시도하지 않음)"""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class RateLimited(QuizError):
    """일일 테스트 생성 한도 초과"""

    status_code = 429

    def __init__(self, limit: int, reset_at: datetime | None):
        self.limit = limit
        self.reset_at = reset_at
        super().__init__(
            "Daily attempt limit reached",
            details={
                "limit": limit,
                "reset_at": reset_at.isoformat() if reset_at else None,
            },
        )


class NoContent(QuizError):
    """조건에 맞는 문항이 하나도 없음"""

    status_code = 404

    def __init__(self, category: str, language: str):
        self.category = category
        self.language = language
        super().__init__(
            "No questions available",
            details={"category": category, "language": language},
        )


class QuestionsNotFound(QuizError):
    """제출한 문항 id 중 DB 에 없는 것이 있음"""

    def __init__(self, submitted: int, found: int):
        self.submitted = submitted
        self.found = found
        super().__init__(
            "Some questions not found",
            details={"submitted": submitted, "found": found},
        )


class InvalidCategory(QuizError):
    def __init__(self, category: str):
        self.category = category
        super().__init__("Invalid category", details={"category": category})


class QuestionNotFound(QuizError):
    status_code = 404

    def __init__(self, question_id):
        self.question_id = question_id
        super().__init__("Question not found", details={"id": str(question_id)})


class SettingsNotFound(QuizError):
    status_code = 404

    def __init__(self):
        super().__init__("Settings not found")


class AnswerIndexOutOfRange(QuizError):
    def __init__(self, index: int, answers_count: int):
        self.index = index
        self.answers_count = answers_count
        super().__init__(
            "correct_answer_index out of range",
            details={"correct_answer_index": index, "answers": answers_count},
        )
