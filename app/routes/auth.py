"""Session-based authentication.

Sessions are issued by the external sign-in service (email one-time codes);
this module only validates the ``session_id`` cookie and exposes the current
user.
"""

import uuid
from datetime import UTC, datetime

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models import Session, User

router = APIRouter()


async def get_current_session(
    request: Request,
    session_id: str | None = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> Session:
    """Dependency to get the current valid session."""
    if not session_id:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        session_uuid = uuid.UUID(session_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid session") from None

    result = await db.execute(select(Session).where(Session.id == session_uuid))
    session = result.scalar_one_or_none()

    if not session:
        raise HTTPException(status_code=401, detail="Session not found")

    if session.expires_at < datetime.now(UTC):
        raise HTTPException(status_code=401, detail="Session expired")

    # Used by the rate limiter to key limits per user
    request.state.user_id = str(session.user_id)
    return session


@router.post("/logout")
async def logout(
    response: Response,
    session_id: str | None = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
):
    """Clear session and logout user."""
    if session_id:
        try:
            session_uuid = uuid.UUID(session_id)
        except ValueError:
            session_uuid = None

        if session_uuid:
            result = await db.execute(select(Session).where(Session.id == session_uuid))
            session = result.scalar_one_or_none()
            if session:
                await db.delete(session)

    response.delete_cookie(key="session_id")
    return {"message": "Logged out successfully"}


@router.get("/me")
async def get_current_user(
    session: Session = Depends(get_current_session),
    db: AsyncSession = Depends(get_db),
):
    """Get current authenticated user info."""
    result = await db.execute(select(User).where(User.id == session.user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(status_code=401, detail="User not found")

    return {
        "id": str(user.id),
        "email": user.email,
    }
