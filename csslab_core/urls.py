# csslab_core/urls.py
from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static
from django.http import JsonResponse


def ping(request):
    return JsonResponse({"status": "ok", "app": "csslab", "version": "dev"})


urlpatterns = [
    path("admin/", admin.site.urls),

    #  앱별 API
    path("api/auth/", include("apps.csslab_accounts.urls")),
    path("api/quiz/", include("apps.csslab_quizzes.urls")),

    #  헬스체크
    path("ping/", ping),
]


if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
