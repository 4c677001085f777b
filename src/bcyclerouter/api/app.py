from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from bcyclerouter.api.routes import router
from bcyclerouter.api.service import RouterService
from bcyclerouter.config.models import AppConfig
from bcyclerouter.utils.logging import configure_logging


def create_app(config: AppConfig, *, service: Optional[RouterService] = None) -> FastAPI:
    """
    Build the HTTP API around one process-wide `RouterService`.

    Pass `service` to inject fakes (tests); otherwise one is built from `config`.
    """

    # Best-effort: `basicConfig` is a no-op when handlers already exist (tests, notebooks).
    configure_logging(config.logging)

    router_service = service or RouterService(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            router_service.close()

    app = FastAPI(title=config.app.name, lifespan=lifespan)
    # Route handlers reach the service through `app.state` instead of a module global.
    app.state.router_service = router_service
    app.include_router(router)
    return app
