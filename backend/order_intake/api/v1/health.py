"""Liveness endpoint."""

from fastapi import APIRouter

router = APIRouter()


@router.get("/health", operation_id="healthCheck")
async def health_check() -> dict[str, str]:
    """Report that the API process is up. Does not touch the AX database."""
    return {"status": "healthy"}
