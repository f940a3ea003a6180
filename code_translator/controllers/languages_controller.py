"""
/**
 * @file code_translator/controllers/languages_controller.py
 * @description 语言列表控制器。
 */
"""

from fastapi import APIRouter

from code_translator.services import list_languages


router = APIRouter()


@router.get("/api/languages")
def get_languages():
    return {"languages": [lang.to_dict() for lang in list_languages()]}
