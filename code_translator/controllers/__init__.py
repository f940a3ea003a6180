"""
/**
 * @file code_translator/controllers/__init__.py
 * @description 控制器（路由）导出。
 */
"""

from .config_controller import router as config_router
from .health_controller import router as health_router
from .languages_controller import router as languages_router
from .pages_controller import router as pages_router
from .session_controller import router as session_router
from .translate_controller import router as translate_router

__all__ = [
    "config_router",
    "health_router",
    "languages_router",
    "pages_router",
    "session_router",
    "translate_router",
]
