from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import router
from app.config.settings import settings
from app.logging_config import configure_logging
from app.services.quote_service import QuoteService


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    service = QuoteService(settings)
    app.state.quote_service = service
    try:
        yield
    finally:
        await service.aclose()


def create_app() -> FastAPI:
    configure_logging(settings.log_level)
    app = FastAPI(title="quotedesk", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
