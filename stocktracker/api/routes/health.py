"""Health check endpoints for API and database monitoring."""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import text
from stocktracker.core.database import get_db
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/")
async def root():
    """Welcome message."""
    return {"message": "welcome to the stock market API"}


@router.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {"status": "healthy", "service": "stocktracker-api"}


@router.get("/health/db")
async def check_database_health(db: AsyncSession = Depends(get_db)):
    """Database connectivity check."""
    try:
        await db.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Database health check failed: {str(e)}", exc_info=True)
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "database": "unreachable"}
        )

    return {"status": "healthy", "database": "reachable"}
