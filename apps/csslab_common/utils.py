# apps/csslab_common/utils.py
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from rest_framework.response import Response

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"

LANG_EN = "en"
LANG_UK = "uk"


@dataclass
class ApiResponse:
    ok: bool
    message: Optional[str] = None
    data: Optional[Any] = None
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"ok": self.ok}
        if self.message:
            out["message"] = self.message
        if self.data is not None:
            out["data"] = self.data
        if self.details:
            out["details"] = self.details
        return out


def error_response(message: str, status: int, details: Optional[Dict[str, Any]] = None) -> Response:
    """실패 응답 공통 포맷: {"ok": false, "message": ..., "details": {...}}"""
    return Response(ApiResponse(False, message, details=details).to_dict(), status=status)


def get_client_ip(request) -> str:
    """
    프록시 뒤에서도 실제 클라이언트 IP 를 얻는다.

    우선순위:
    1) X-Forwarded-For 의 첫 번째 값
    2) X-Real-IP
    3) REMOTE_ADDR
    """
    forwarded = (request.META.get("HTTP_X_FORWARDED_FOR") or "").split(",")[0].strip()
    if forwarded:
        return forwarded
    real_ip = (request.META.get("HTTP_X_REAL_IP") or "").strip()
    if real_ip:
        return real_ip
    return request.META.get("REMOTE_ADDR") or UNKNOWN_IP


def get_preferred_language(request) -> str:
    """Accept-Language 가 uk 로 시작하면 우크라이나어, 그 외엔 영어"""
    header = (request.META.get("HTTP_ACCEPT_LANGUAGE") or "").lower()
    if header.startswith(LANG_UK):
        return LANG_UK
    return LANG_EN
