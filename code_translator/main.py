"""
/**
 * @file code_translator/main.py
 * @description FastAPI 应用入口（仅装配路由、中间件与配置监听）。
 */
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from code_translator.config import CONFIG_LOCAL_PATH, CONFIG_PATH, load_settings, reload_settings
from code_translator.controllers import (
    config_router,
    health_router,
    languages_router,
    pages_router,
    session_router,
    translate_router,
)

app = FastAPI(title="Code Translator")
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ConfigEventHandler(FileSystemEventHandler):
    """Handler for config file changes"""

    def on_modified(self, event):
        if event.is_directory:
            return
        if event.src_path in (CONFIG_PATH, CONFIG_LOCAL_PATH):
            reload_settings()

    on_created = on_modified


_observer = None


@app.on_event("startup")
async def startup_event():
    global _observer
    settings = load_settings()
    if settings.api_key_warning:
        logger.warning(settings.api_key_warning)
    try:
        _observer = Observer()
        config_dir = os.path.dirname(CONFIG_PATH)
        _observer.schedule(ConfigEventHandler(), config_dir, recursive=False)
        _observer.start()
        logger.info(f"Config watcher started on {config_dir}")
    except OSError as e:
        _observer = None
        logger.error(f"Failed to start config watcher: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    global _observer
    if _observer:
        _observer.stop()
        _observer.join()
        _observer = None


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(config_router)
app.include_router(languages_router)
app.include_router(translate_router)
app.include_router(session_router)
app.include_router(pages_router)


def run() -> None:
    import uvicorn

    uvicorn.run(
        "code_translator.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
