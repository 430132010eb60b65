import re
from django.contrib.auth import get_user_model
from rest_framework import serializers, validators

from .models import Profile

User = get_user_model()

PASSWORD_REGEX = re.compile(r"^(?=.*[A-Za-z])(?=.*\d).{8,}$")  # 문자+숫자 포함 8자 이상


class UserSerializer(serializers.ModelSerializer):
    display_name = serializers.SerializerMethodField()
    subscription_tier = serializers.SerializerMethodField()
    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = ("id", "username", "email", "display_name", "subscription_tier", "avatar_url", "is_staff")

    def get_display_name(self, obj):
        return getattr(getattr(obj, "profile", None), "display_name", "")

    def get_subscription_tier(self, obj):
        return getattr(getattr(obj, "profile", None), "subscription_tier", "free")

    def get_avatar_url(self, obj):
        profile = getattr(obj, "profile", None)
        return profile.avatar_url if profile else None


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ("display_name", "subscription_tier", "profile_image")
        # 등급은 결제 쪽에서만 바뀐다
        read_only_fields = ("subscription_tier",)


class RegisterSerializer(serializers.ModelSerializer):
    name = serializers.CharField(required=False, allow_blank=True, max_length=50)
    password = serializers.CharField(write_only=True)
    username = serializers.CharField(
        max_length=150,
        validators=[
            validators.UniqueValidator(
                queryset=User.objects.all(),
                message="Username is already taken.",
            )
        ],
    )
    email = serializers.EmailField(required=True)

    class Meta:
        model = User
        fields = ("username", "email", "password", "name")

    def validate_password(self, value):
        if not PASSWORD_REGEX.match(value or ""):
            raise serializers.ValidationError("Password must be at least 8 characters and contain letters and digits.")
        return value

    def create(self, validated_data):
        user = User.objects.create_user(
            username=validated_data["username"],
            email=validated_data["email"],
            password=validated_data["password"],
        )
        # 프로필 업데이트 (signal 이 만든 user.profile 인스턴스를 그대로 수정)
        prof = user.profile
        prof.display_name = validated_data.get("name", "")
        prof.save(update_fields=["display_name"])
        return user
