from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.api.v1 import power_flow
from app.core.logging import RequestLoggingMiddleware, setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    setup_logging(json_format=settings.log_json, debug=settings.debug)
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)

    application.include_router(
        power_flow.router, prefix="/api/v1/power-flow", tags=["power-flow"]
    )

    @application.get("/health")
    async def health_check() -> dict:
        return {
            "status": "ok",
            "solver": {
                "max_iterations": settings.gs_max_iterations,
                "tolerance": settings.gs_tolerance,
                "update_rule": settings.gs_update_rule.value,
            },
        }

    return application


app = create_app()
