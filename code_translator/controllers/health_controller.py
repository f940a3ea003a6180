"""
/**
 * @file code_translator/controllers/health_controller.py
 * @description 健康检查控制器。
 */
"""

from fastapi import APIRouter

from code_translator.config import load_settings
from code_translator.utils import is_valid_url


router = APIRouter()


@router.get("/health")
def health():
    settings = load_settings()

    api_keys_status = {
        "openai": bool(settings.resolve_openai_key()),
        "auth": bool(settings.resolve_auth_key()),
    }
    auth_url = settings.resolve_auth_url()
    endpoints_status = {
        "completion": is_valid_url(settings.completion_endpoint),
        "auth": bool(auth_url) and is_valid_url(auth_url),
    }

    is_healthy = all(api_keys_status.values()) and all(endpoints_status.values())

    return {
        "status": "ok" if is_healthy else "degraded",
        "checks": {
            "api_keys": api_keys_status,
            "endpoints": endpoints_status,
        },
    }
