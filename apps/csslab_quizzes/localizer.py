# apps/csslab_quizzes/localizer.py
from __future__ import annotations

from typing import Any, Dict

from apps.csslab_common.utils import LANG_UK

__all__ = ["project"]


def project(question, language: str, include_answer_key: bool = False) -> Dict[str, Any]:
    """
    저장된 2개 국어 문항을 요청 언어로 변환.

    - 번역이 없으면 다른 언어로 대체하지 않고 빈 값으로 내려준다.
    - include_answer_key=False 이면 correct_answer_index / explanation 키 자체가 없다.
      (테스트 응시용 payload 는 항상 False)
    """
    use_uk = language == LANG_UK
    if use_uk:
        question_text = question.question_text_uk or ""
        answers = list(question.answers_uk or [])
        explanation = question.explanation_uk or None
    else:
        question_text = question.question_text or ""
        answers = list(question.answers or [])
        explanation = question.explanation or None

    data: Dict[str, Any] = {
        "id": str(question.id),
        "question_text": question_text,
        "code_snippet": question.code_snippet,
        "answers": answers,
        "category": question.category,
        "difficulty": question.difficulty,
    }
    if not include_answer_key:
        return data

    # 관리자/채점 결과용: 정답 + 편집용 원본 필드
    data.update(
        {
            "correct_answer_index": question.correct_answer_index,
            "explanation": explanation,
            "question_text_en": question.question_text,
            "question_text_uk": question.question_text_uk,
            "answers_en": question.answers,
            "answers_uk": question.answers_uk,
            "explanation_en": question.explanation,
            "explanation_uk": question.explanation_uk,
            "created_at": question.created_at.isoformat() if question.created_at else None,
            "updated_at": question.updated_at.isoformat() if question.updated_at else None,
        }
    )
    return data
