"""CAMS FastAPI application."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cams.api.assessments import router as assessments_router
from cams.api.health import router as health_router
from cams.api.rules import router as rules_router
from cams.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CAMS - Competency Assessment Matrix Service",
    description="Scores technician competency assessments and keeps their change history",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT"],
    allow_headers=["Content-Type", "X-Actor"],
)

app.include_router(health_router, tags=["Health"])
app.include_router(rules_router, prefix="/v1", tags=["Rules"])
app.include_router(assessments_router, prefix="/v1", tags=["Assessments"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"service": "CAMS", "version": "0.1.0", "docs": "/docs"}
