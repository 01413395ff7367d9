import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import Settings, get_settings
from .monitors import MonitorService
from .routers import monitors, notify, scrape

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, service: Optional[MonitorService] = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.monitors = service or MonitorService(settings)
        logger.info("Price Drop Alert API up (env=%s)", settings.env)
        yield
        await app.state.monitors.shutdown()

    app = FastAPI(title="Price Drop Alert", version="0.1.0", lifespan=lifespan)

    @app.get("/health")
    def healthcheck():
        return {"status": "ok", "env": settings.env}

    app.include_router(scrape.router, prefix="/api", tags=["scrape"])
    app.include_router(monitors.router, prefix="/api", tags=["monitors"])
    app.include_router(notify.router, prefix="/api", tags=["notify"])
    return app


settings = get_settings()
logging.basicConfig(level=settings.log_level.upper())
app = create_app(settings)
