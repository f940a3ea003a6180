"""
/**
 * @file code_translator/controllers/session_controller.py
 * @description 交互式翻译会话（WebSocket）：转发浏览器事件到会话控制器。
 */
"""

import logging
from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from code_translator.controllers.dependencies import get_auth_provider
from code_translator.models.session_models import ClientMessage
from code_translator.services.session_service import TranslatorSession


logger = logging.getLogger(__name__)

router = APIRouter()


async def dispatch(session: TranslatorSession, msg: ClientMessage) -> None:
    if msg.type == "edit":
        await session.on_edit(msg.text or "")
    elif msg.type == "set_source_language":
        await session.on_source_language(msg.value or "")
    elif msg.type == "set_target_language":
        await session.on_target_language(msg.value or "")
    elif msg.type == "open_sign_in":
        await session.open_sign_in()
    elif msg.type == "close_sign_in":
        await session.close_sign_in()
    elif msg.type == "auth":
        await session.on_auth_event(msg.event or "", msg.access_token)
    elif msg.type == "sign_out":
        await session.sign_out()


@router.websocket("/ws/session")
async def session_socket(websocket: WebSocket, access_token: Optional[str] = None):
    await websocket.accept()
    session = TranslatorSession(websocket.send_json, get_auth_provider(access_token))
    try:
        await session.start()
        while True:
            data = await websocket.receive_text()
            try:
                msg = ClientMessage.model_validate_json(data)
            except ValidationError as e:
                logger.warning(f"Bad session message: {e.errors()}")
                await session.toast("error", "Unsupported message")
                continue
            await dispatch(session, msg)
    except WebSocketDisconnect:
        logger.info("Session socket closed")
    finally:
        await session.stop()
