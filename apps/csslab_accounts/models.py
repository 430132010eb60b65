from django.db import models
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

User = get_user_model()


class SubscriptionTier(models.TextChoices):
    FREE    = "free", "Free"
    PRO     = "pro", "Pro"
    PREMIUM = "premium", "Premium"


# 한도 없이 퀴즈를 생성할 수 있는 등급
UNLIMITED_TIERS = frozenset({SubscriptionTier.PRO, SubscriptionTier.PREMIUM})


class Profile(models.Model):
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="profile",
    )
    # 기본 프로필
    display_name = models.CharField(max_length=50, blank=True)
    subscription_tier = models.CharField(
        max_length=16,
        choices=SubscriptionTier.choices,
        default=SubscriptionTier.FREE,
    )

    # 프로필 사진 (리더보드 아바타)
    profile_image = models.ImageField(
        upload_to="profiles/",
        blank=True,
        null=True,
    )

    def __str__(self) -> str:
        return self.display_name or getattr(self.user, "username", "user")

    @property
    def avatar_url(self) -> str | None:
        if not self.profile_image:
            return None
        return self.profile_image.url


def get_tier(user) -> str:
    """프로필이 없거나 익명이면 free"""
    profile = getattr(user, "profile", None) if user is not None else None
    if profile is None:
        return SubscriptionTier.FREE
    return profile.subscription_tier or SubscriptionTier.FREE


# 회원 생성 시 프로필 자동 생성/보정
@receiver(post_save, sender=User)
def ensure_profile_exists(sender, instance: User, created: bool, **kwargs):
    if created:
        Profile.objects.get_or_create(user=instance)
    else:
        if not hasattr(instance, "profile"):
            Profile.objects.get_or_create(user=instance)
