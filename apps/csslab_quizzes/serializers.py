from rest_framework import serializers

from .models import QuizCategory, Difficulty, QuizResult, QuizSettings, ResultCategory


#
# 문항 작성/수정 (관리자)
#
class QuestionWriteSerializer(serializers.Serializer):
    question_text        = serializers.CharField(min_length=10, max_length=1000)
    question_text_uk     = serializers.CharField(min_length=10, max_length=1000, required=False, allow_null=True)
    code_snippet         = serializers.CharField(max_length=5000, required=False, allow_null=True, allow_blank=True)
    answers              = serializers.ListField(
        child=serializers.CharField(min_length=1, max_length=500), min_length=2, max_length=6,
    )
    answers_uk           = serializers.ListField(
        child=serializers.CharField(min_length=1, max_length=500), min_length=2, max_length=6,
        required=False, allow_null=True,
    )
    correct_answer_index = serializers.IntegerField(min_value=0)
    explanation          = serializers.CharField(max_length=2000, required=False, allow_null=True, allow_blank=True)
    explanation_uk       = serializers.CharField(max_length=2000, required=False, allow_null=True, allow_blank=True)
    category             = serializers.ChoiceField(choices=QuizCategory.choices)
    difficulty           = serializers.ChoiceField(choices=Difficulty.choices)

    def validate(self, attrs):
        answers = attrs.get("answers")
        index = attrs.get("correct_answer_index")
        if answers is not None and index is not None and index >= len(answers):
            raise serializers.ValidationError({"correct_answer_index": "correct_answer_index out of range"})
        return attrs


#
# 설정
#
class QuizSettingsSerializer(serializers.ModelSerializer):
    questions_per_test = serializers.IntegerField(min_value=5, max_value=100)
    time_per_question = serializers.IntegerField(min_value=10, max_value=300)

    class Meta:
        model = QuizSettings
        fields = ("questions_per_test", "time_per_question", "updated_at")
        read_only_fields = ("updated_at",)


#
# 제출
#
class SubmittedAnswerSerializer(serializers.Serializer):
    question_id = serializers.UUIDField()
    answer_index = serializers.IntegerField(min_value=0)


class SubmitSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=ResultCategory.choices)
    answers = SubmittedAnswerSerializer(many=True, allow_empty=False)
    time_taken = serializers.IntegerField(min_value=0)
    username = serializers.CharField(min_length=1, max_length=50, required=False, allow_null=True)


class QuizResultSerializer(serializers.ModelSerializer):
    user_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = QuizResult
        fields = (
            "id",
            "user_id",
            "username",
            "category",
            "score",
            "total_questions",
            "time_taken",
            "created_at",
        )
