"""
Authentication API endpoints.

Identity itself lives with the auth provider. These endpoints expose the
caller, revoke tokens, and (in debug mode only) mint tokens for local use.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.config import settings
from backend.app.core.dependencies import get_bearer_token, get_current_user
from backend.app.core.jwt import create_access_token
from backend.app.core.redis_client import get_redis
from backend.app.core.token_revocation import revoke_all_user_tokens, revoke_token
from backend.app.db.session import get_db
from backend.app.models.user import User
from backend.app.schemas.auth import DevTokenRequest, LogoutResponse, TokenResponse, UserResponse
from backend.app.schemas.base import Envelope

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/test-token", response_model=Envelope[TokenResponse])
async def generate_test_token(
    token_data: DevTokenRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Mint a token for local development.

    Creates the user mirror row if needed. Disabled unless DEBUG is on.
    """
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    result = await db.execute(select(User).where(User.id == token_data.user_id))
    user = result.scalar_one_or_none()

    if user is None:
        user = User(id=token_data.user_id, email=token_data.email, name=token_data.name)
        db.add(user)
        await db.commit()

    token = create_access_token(claims={"sub": user.email, "user_id": user.id})
    return Envelope(data=TokenResponse(access_token=token, user_id=user.id))


@router.get("/me", response_model=Envelope[UserResponse])
async def get_current_user_info(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the authenticated user's record.
    """
    result = await db.execute(select(User).where(User.id == current_user["user_id"]))
    user = result.scalar_one()
    return Envelope(data=UserResponse.model_validate(user))


@router.post("/logout", response_model=Envelope[LogoutResponse])
async def logout(
    all_sessions: bool = Query(False, alias="all", description="Revoke every token of this user"),
    token: str = Depends(get_bearer_token),
    current_user: dict = Depends(get_current_user),
    redis=Depends(get_redis)
):
    """
    Revoke the presented token, or every token of the caller with ``?all=true``.
    """
    if all_sessions:
        revoked = await revoke_all_user_tokens(redis, current_user["user_id"])
    else:
        revoked = await revoke_token(redis, token, current_user["user_id"])

    return Envelope(data=LogoutResponse(revoked=revoked, all_sessions=all_sessions))
