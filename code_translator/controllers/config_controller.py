"""
/**
 * @file code_translator/controllers/config_controller.py
 * @description 配置状态控制器：前端据此展示缺少密钥的警告横幅。
 */
"""

from fastapi import APIRouter

from code_translator.config import load_settings


router = APIRouter()


@router.get("/api/config/status")
def get_config_status():
    settings = load_settings()
    return {
        "api_key_configured": bool(settings.resolve_openai_key()),
        "auth_configured": bool(settings.resolve_auth_url() and settings.resolve_auth_key()),
        # anon key is public, the page uses it for the sign-in widget
        "auth": {"url": settings.resolve_auth_url(), "anon_key": settings.resolve_auth_key()},
        "warning": settings.api_key_warning,
        "model": settings.translation_model,
        "debounce_ms": int(settings.debounce_seconds * 1000),
    }
