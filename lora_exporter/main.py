from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from common.config import Settings, get_settings

from . import __version__
from .services import ExporterServices, build_services
from .transports.http.endpoints import router as webhook_router

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ExporterServices] = None,
) -> FastAPI:
    """App factory: webhook + /metrics sobre los servicios del proceso.

    El forwarder y el poller arrancan con el lifespan de la app y se
    detienen al cerrar el servidor.
    """
    if services is None:
        services = build_services(settings or get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        services.start()
        try:
            yield
        finally:
            services.stop()

    app = FastAPI(title="LoRa Exporter", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.include_router(webhook_router)
    return app
