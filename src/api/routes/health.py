"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from api.v1.dependencies import get_encryption_service
from core.config import settings
from core.exceptions import CryptoError
from domain.services.encryption_service import EncryptionService
from infrastructure.database.session import get_async_session

router = APIRouter(tags=["health"])

API_VERSION = "1.0.0"


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    timestamp: str
    environment: str
    database: str | None = None
    encryption: str | None = None


@router.get("/health", response_model=HealthResponse, summary="Basic health check")
async def health_check() -> HealthResponse:
    """
    Basic health check for load balancers.

    Returns service status without checking dependencies.
    """
    return HealthResponse(
        status="healthy",
        version=API_VERSION,
        timestamp=_now(),
        environment=settings.app_env,
    )


@router.get(
    "/health/detailed",
    response_model=HealthResponse,
    summary="Detailed health check",
)
async def detailed_health_check(
    db: AsyncSession = Depends(get_async_session),
    encryption: EncryptionService = Depends(get_encryption_service),
) -> HealthResponse:
    """
    Detailed health check covering the database and the message cipher.

    The cipher check encrypts and decrypts a probe string with a throwaway key.
    """
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception as e:
        db_status = f"unhealthy: {str(e)}"

    try:
        key = encryption.generate_key()
        payload = encryption.encrypt("ping", key)
        ok = encryption.decrypt(payload.ciphertext, key, payload.iv) == "ping"
        crypto_status = "healthy" if ok else "unhealthy: round trip mismatch"
    except CryptoError as e:
        crypto_status = f"unhealthy: {e.message}"

    healthy = db_status == "healthy" and crypto_status == "healthy"

    return HealthResponse(
        status="healthy" if healthy else "degraded",
        version=API_VERSION,
        timestamp=_now(),
        environment=settings.app_env,
        database=db_status,
        encryption=crypto_status,
    )


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
