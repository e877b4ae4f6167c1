"""Health check endpoints for the database and the upload directory."""

import os

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db

router = APIRouter()


@router.get("")
async def health():
    return {"status": "healthy"}


@router.get("/db")
async def db_health(db: AsyncSession = Depends(get_db)):
    """Check database connectivity and report the statement timeout in effect."""
    try:
        await db.execute(text("SELECT 1"))
        statement_timeout = (await db.execute(text("SHOW statement_timeout"))).scalar()
    except Exception as e:
        raise HTTPException(503, f"Database health check failed: {e}") from e

    return {
        "status": "healthy",
        "statement_timeout": statement_timeout,
        "expected_timeout_ms": settings.db_statement_timeout_ms,
    }


@router.get("/storage")
async def storage_health():
    """Check that uploaded PDFs can be written."""
    upload_dir = settings.upload_dir
    if not os.path.isdir(upload_dir) or not os.access(upload_dir, os.W_OK):
        raise HTTPException(503, f"Upload directory is not writable: {upload_dir}")
    return {"status": "healthy", "upload_dir": upload_dir}
