"""Health and metrics endpoints."""

from fastapi import APIRouter

from cams.api.rules import RulesDep

router = APIRouter()


@router.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/metrics")
async def metrics(rules: RulesDep):
    """Basic metrics endpoint for observability."""
    return {
        "service": "cams",
        "version": "0.1.0",
        "rules_version": rules.version,
        "rules_hash": rules.table_hash,
    }
