"""
FamilyEvents Backend — Profile and Sign-in Route Handlers
=========================================================

What:  GET/PUT /api/profile (the caller's own record) and POST
       /api/auth/demo (demo sign-in, only when DEMO_LOGIN_ENABLED).
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db_session
from app.dependencies import get_current_identity
from app.schemas.auth import ProfileResponse, ProfileUpdate, TokenResponse
from app.schemas.common import ERROR_RESPONSES, ErrorResponse
from app.services.access_control import Identity
from app.services.auth_service import auth_service
from app.services.profile_service import profile_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", responses=ERROR_RESPONSES)


@router.get("/profile", response_model=ProfileResponse, tags=["Profile"], summary="Your profile")
async def get_profile(
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.get_profile(db, identity)


@router.put(
    "/profile",
    response_model=ProfileResponse,
    tags=["Profile"],
    responses={409: {"description": "Email already in use", "model": ErrorResponse}},
    summary="Update your name, email or avatar",
)
async def update_profile(
    body: ProfileUpdate,
    identity: Identity = Depends(get_current_identity),
    db: AsyncSession = Depends(get_db_session),
) -> ProfileResponse:
    return await profile_service.update_profile(db, identity, body)


@router.post(
    "/auth/demo",
    response_model=TokenResponse,
    tags=["Auth"],
    summary="Sign in as the demo user",
    description="Creates the demo account on first use. Returns 404 unless DEMO_LOGIN_ENABLED is set.",
)
async def demo_login(db: AsyncSession = Depends(get_db_session)) -> TokenResponse:
    user, token = await auth_service.demo_login(db)
    logger.info("Demo sign-in for %s", user.id)
    return TokenResponse(
        access_token=token,
        expires_in=settings.jwt_ttl_minutes * 60,
        user=ProfileResponse.model_validate(user),
    )
