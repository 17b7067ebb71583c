"""Auth Routes: register, login, logout and the current session.

Invariants:
    - register/login return a bearer token for every later request
    - The profile exists before the response is sent (auth-change listener)
    - logout signs the user out once their last token is revoked
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from swapsquare.api.dependencies import (
    get_current_user, get_marketplace, get_token, issue_token, revoke_token,
)
from swapsquare.core.entities import UserRef
from swapsquare.schemas.auth import LoginRequest, RegisterRequest, SessionResponse
from swapsquare.services.marketplace import Marketplace

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post(
    "/register", response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(
    body: RegisterRequest, market: Marketplace = Depends(get_marketplace),
):
    user = await market.profiles.register(
        body.name, body.city, body.email, body.password,
    )
    return SessionResponse.build(
        issue_token(user), user, await market.profiles.get_profile(user.id),
    )


@router.post("/login", response_model=SessionResponse)
async def login(
    body: LoginRequest, market: Marketplace = Depends(get_marketplace),
):
    user = await market.identity.authenticate(body.email, body.password)
    logger.info("User signed in", extra={"user_id": user.id})
    return SessionResponse.build(
        issue_token(user), user, await market.profiles.get_profile(user.id),
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    token: str = Depends(get_token),
    market: Marketplace = Depends(get_marketplace),
):
    user = revoke_token(token)
    if user is not None:
        await market.identity.sign_out(user.id)
        logger.info("User signed out", extra={"user_id": user.id})
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=SessionResponse)
async def me(
    token: str = Depends(get_token),
    user: UserRef = Depends(get_current_user),
    market: Marketplace = Depends(get_marketplace),
):
    return SessionResponse.build(
        token, user, await market.profiles.get_profile(user.id),
    )
