"""
/**
 * @file code_translator/controllers/dependencies.py
 * @description 路由依赖：Bearer Token 校验（委托认证服务）。
 */
"""

from fastapi import HTTPException, Request

from code_translator.models.session_models import AuthUser
from code_translator.services.auth_service import AuthError, SupabaseAuthProvider


def get_auth_provider(access_token: str) -> SupabaseAuthProvider:
    return SupabaseAuthProvider(access_token=access_token)


def require_user(request: Request) -> AuthUser:
    auth = request.headers.get("authorization") or ""
    if not auth.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    token = auth.split(" ", 1)[1].strip()
    try:
        session = get_auth_provider(token).get_session()
    except AuthError as e:
        raise HTTPException(status_code=503, detail=f"Auth provider unavailable: {e}")
    if session is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return session.user
