import logging
from contextlib import asynccontextmanager
from typing import Any, Mapping

from fastapi import FastAPI

from magic_code.application.strategy import MagicCodeStrategy
from magic_code.config import load_config
from magic_code.infrastructure.email.http_email_sender import HttpEmailCodeSender
from magic_code.infrastructure.memory.token_storage import MemoryTokenStorage
from magic_code.infrastructure.redis_cache.pool import close_redis, get_redis
from magic_code.infrastructure.redis_cache.token_storage import RedisTokenStorage
from magic_code.logging import setup_logging
from magic_code.presentation.api import api
from magic_code.settings import Settings, get_settings

logger = logging.getLogger("magic_code.main")


async def principal_from_user(
    user: Mapping[str, Any], options: Mapping[str, Any]
) -> dict[str, Any]:
    """Verification callback: the stored user record is the principal."""
    return dict(user)


def build_strategy(settings: Settings, sender: HttpEmailCodeSender) -> MagicCodeStrategy:
    if settings.storage_backend == "redis":
        storage = RedisTokenStorage(get_redis(settings.redis_url))
    else:
        storage = MemoryTokenStorage()
    config = load_config(settings.magic_code_args(), storage=storage)
    return MagicCodeStrategy(config, sender, principal_from_user)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    logger.info(
        "magic code service started",
        extra={"env": settings.app_env, "storage": settings.storage_backend},
    )
    try:
        yield
    finally:
        # shutdown
        await app.state.email_sender.aclose()
        if settings.storage_backend == "redis":
            await close_redis()
        logger.info("magic code service stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.log_level, env=settings.app_env)

    sender = HttpEmailCodeSender(
        settings.smtp_base_url,
        recipient_field=settings.user_key_field_name,
        subject=settings.email_subject,
    )
    app = FastAPI(title="Magic Code API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.email_sender = sender
    # invalid engine configuration fails here, before the app serves anything
    app.state.strategy = build_strategy(settings, sender)
    app.include_router(api)
    return app


app = create_app()
