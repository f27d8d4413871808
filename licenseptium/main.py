import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from licenseptium.api.routes import validation_router
from licenseptium.config import Settings, get_settings
from licenseptium.db import build_engine, build_sessionmaker, create_tables


def create_app(settings: Settings) -> FastAPI:
    engine = build_engine(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        create_tables(engine)
        yield
        engine.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = build_sessionmaker(engine)

    app.include_router(validation_router)

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    return app


settings = get_settings()

logging.basicConfig(level=settings.log_level)

app = create_app(settings)
