"""
/**
 * @file code_translator/controllers/translate_controller.py
 * @description 代码翻译控制器（仅限已登录用户的无状态接口）。
 */
"""

from fastapi import APIRouter, Depends, HTTPException

from code_translator.controllers.dependencies import require_user
from code_translator.models.session_models import AuthUser
from code_translator.models.translate_request_model import TranslateRequest
from code_translator.services.translation_service import TranslationError, translate_code


router = APIRouter()


@router.post("/api/translate")
def translate(req: TranslateRequest, user: AuthUser = Depends(require_user)):
    try:
        output = translate_code(req.code, req.source_language, req.target_language, model=req.model)
    except TranslationError as e:
        raise HTTPException(status_code=502, detail={"status": "error", "message": str(e)})
    return {"status": "success", "output": output}
