# apps/csslab_quizzes/views.py
import logging

from rest_framework import permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.csslab_common.utils import error_response, get_preferred_language

from .exceptions import QuizError
from .identity import resolve_identity
from .serializers import (
    QuestionWriteSerializer,
    QuizResultSerializer,
    QuizSettingsSerializer,
    SubmitSerializer,
)
from .services import (
    DEFAULT_LEADERBOARD_LIMIT,
    LEADERBOARD_ALL,
    create_question,
    delete_question,
    get_engine,
    get_quiz_settings,
    list_questions,
    update_question,
    update_quiz_settings,
)

logger = logging.getLogger(__name__)


def quiz_error_response(exc: QuizError) -> Response:
    return error_response(exc.message, exc.status_code, exc.details)


class QuizAPIView(APIView):
    """QuizError 를 공통 에러 포맷으로 변환"""

    def handle_exception(self, exc):
        if isinstance(exc, QuizError):
            return quiz_error_response(exc)
        return super().handle_exception(exc)


#
#   관리자: 문항 목록/생성
#
class QuestionListView(QuizAPIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        questions = list_questions(get_preferred_language(request))
        return Response({"questions": questions})

    def post(self, request):
        ser = QuestionWriteSerializer(data=request.data)
        if not ser.is_valid():
            return error_response("Invalid input", status.HTTP_400_BAD_REQUEST, ser.errors)
        question = create_question(ser.validated_data, get_preferred_language(request))
        return Response({"question": question}, status=status.HTTP_201_CREATED)


#
#   관리자: 문항 수정/삭제
#
class QuestionDetailView(QuizAPIView):
    permission_classes = [permissions.IsAdminUser]

    def put(self, request, question_id):
        ser = QuestionWriteSerializer(data=request.data, partial=True)
        if not ser.is_valid():
            return error_response("Invalid input", status.HTTP_400_BAD_REQUEST, ser.errors)
        question = update_question(question_id, ser.validated_data, get_preferred_language(request))
        return Response({"question": question})

    def delete(self, request, question_id):
        delete_question(question_id)
        return Response({"message": "Question deleted successfully"})


#
#   관리자: 설정
#
class QuizSettingsView(QuizAPIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        return Response({"settings": QuizSettingsSerializer(get_quiz_settings()).data})

    def put(self, request):
        ser = QuizSettingsSerializer(data=request.data)
        if not ser.is_valid():
            return error_response("Invalid input", status.HTTP_400_BAD_REQUEST, ser.errors)
        quiz_settings = update_quiz_settings(ser.validated_data)
        return Response({"settings": QuizSettingsSerializer(quiz_settings).data})


#
#   오늘 남은 횟수
#
class CheckLimitView(QuizAPIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        limit_status = get_engine().check_limit(resolve_identity(request))
        return Response(limit_status.to_dict())


#
#   테스트 생성 (정답 키 없음)
#
class GenerateTestView(QuizAPIView):
    permission_classes = [permissions.AllowAny]

    def get(self, request):
        category = request.query_params.get("category") or "mix"
        payload = get_engine().generate_test(
            category,
            get_preferred_language(request),
            resolve_identity(request),
        )
        return Response(payload, status=status.HTTP_200_OK)


#
#   제출 / 채점
#
class SubmitTestView(QuizAPIView):
    """
    POST /api/quiz/submit/

    {
      "category": "css",
      "answers": [{"question_id": "...", "answer_index": 0}, ...],
      "time_taken": 120,
      "username": "guest name (익명일 때만 사용)"
    }
    """

    permission_classes = [permissions.AllowAny]

    def post(self, request):
        ser = SubmitSerializer(data=request.data)
        if not ser.is_valid():
            return error_response("Invalid input", status.HTTP_400_BAD_REQUEST, ser.errors)
        payload = ser.validated_data

        out = get_engine().submit_test(
            identity=resolve_identity(request),
            category=payload["category"],
            answers=payload["answers"],
            time_taken=payload["time_taken"],
            display_name=payload.get("username"),
            language=get_preferred_language(request),
        )
        return Response(
            {
                "result": QuizResultSerializer(out["result"]).data,
                "detailed_results": out["detailed_results"],
            },
            status=status.HTTP_200_OK,
        )


#
#   내 기록
#
class MyResultsView(QuizAPIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        results = get_engine().my_results(request.user.pk)
        return Response({"results": QuizResultSerializer(results, many=True).data})


#
#   리더보드
#
class LeaderboardView(QuizAPIView):
    permission_classes = [permissions.AllowAny]
    authentication_classes = []

    def get(self, request):
        category = request.query_params.get("category") or LEADERBOARD_ALL
        try:
            limit = int(request.query_params.get("limit") or DEFAULT_LEADERBOARD_LIMIT)
        except ValueError:
            limit = DEFAULT_LEADERBOARD_LIMIT
        leaderboard = get_engine().list_leaderboard(category, limit)
        return Response({"leaderboard": leaderboard})
