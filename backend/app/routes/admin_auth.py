"""
East Village Everything — Admin Login Routes
==============================================

What:  Session login/logout for the admin console.
How:   POST /admin/login checks the credentials with UserService and, on
       success, stores the user in the signed session cookie. Every attempt
       passes through the per-IP login throttle; a successful login clears
       the IP's attempt history.
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.middleware.auth import end_session, require_admin, start_session
from app.middleware.rate_limit import login_throttle, throttle_login
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, UserResponse
from app.services.user_service import user_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin: Auth"])


@router.post(
    "/login",
    response_model=UserResponse,
    responses={
        401: {"description": "Invalid email or password", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
    summary="Log in to the admin console",
)
async def login(
    request: Request,
    credentials: LoginRequest,
    client_ip: str = Depends(throttle_login),
    db: AsyncSession = Depends(get_db_session),
) -> UserResponse:
    user = await user_service.authenticate(db, credentials.email, credentials.password)
    if user is None:
        raise AuthenticationError(message="Invalid email or password")

    login_throttle.reset(client_ip)
    start_session(request, user)
    logger.info("Admin login: %s from %s", user.email, client_ip)
    return user


@router.post("/logout", status_code=204, summary="Log out")
async def logout(request: Request) -> Response:
    end_session(request)
    return Response(status_code=204)


@router.get(
    "/api/me",
    response_model=UserResponse,
    responses={401: {"description": "Not logged in", "model": ErrorResponse}},
    summary="The logged-in admin",
)
async def me(user: UserResponse = Depends(require_admin)) -> UserResponse:
    return user
