import logging

from fastapi import FastAPI

from .config import get_settings
from .errors import register_exception_handlers
from .log import configure_logging
from .migration_runner import run_migrations_once
from .realtime import endpoint as realtime
from .realtime.broker import TopicBroker
from .routers import alarms, chat, messages

settings = get_settings()
configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.broker = TopicBroker()
register_exception_handlers(app)


@app.get("/health")
async def health():
    return {"status": "ok", "environment": settings.environment}


@app.on_event("startup")
async def ensure_schema() -> None:
    if not settings.run_migrations_on_startup:
        return
    try:
        run_migrations_once()
    except Exception:  # pragma: no cover - startup failures should surface
        logger.exception("Database migration failed")
        raise


app.include_router(chat.router)
app.include_router(messages.router)
app.include_router(alarms.router)
app.include_router(realtime.router)
