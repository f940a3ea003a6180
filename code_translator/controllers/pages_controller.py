"""
/**
 * @file code_translator/controllers/pages_controller.py
 * @description 前端页面（静态 HTML）。
 */
"""

import os

from fastapi import APIRouter
from fastapi.responses import FileResponse


STATIC_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "static")

router = APIRouter()


@router.get("/", include_in_schema=False)
def index():
    return FileResponse(os.path.join(STATIC_DIR, "index.html"))
