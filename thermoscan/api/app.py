"""
FastAPI application for thermogram analysis.

Run with ``python -m thermoscan.api.app`` or ``uvicorn thermoscan.api.app:app``.
"""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from thermoscan.api.routes.analysis import router as analysis_router
from thermoscan.infrastructure.config.settings import settings
from thermoscan.infrastructure.constants.pipeline_constants import DISCLAIMER
from thermoscan.infrastructure.container import Container
from thermoscan.schemas import HealthCheckResponse
from thermoscan.utils.timezone_utils import utc_now

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> FastAPI:
    container = container or Container(settings)

    app = FastAPI(
        title="ThermoScan API",
        description="Thermogram quality check, anomaly analysis and heatmap rendering.",
        version="1.0.0",
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=container.settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(analysis_router)

    @app.get("/health", response_model=HealthCheckResponse, tags=["Health"])
    async def health_check():
        return HealthCheckResponse(
            enrichment_available=container.settings.is_enrichment_configured(),
            disclaimer=DISCLAIMER,
            timestamp=utc_now(),
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings.validate()
    uvicorn.run(
        "thermoscan.api.app:app",
        host=settings.uvicorn_host,
        port=settings.uvicorn_port,
    )
