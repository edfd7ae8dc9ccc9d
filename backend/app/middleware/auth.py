"""
East Village Everything — Admin Session Authentication
========================================================

What:  Session helpers and the `require_admin` dependency guarding the
       admin API.
How:   Starlette's SessionMiddleware (registered in main.py) keeps a signed
       cookie. Logging in stores the user's id and public profile in it;
       require_admin reads them back and raises AuthenticationError (401)
       when they are missing.
"""

import logging

from starlette.requests import Request

from app.exceptions import AuthenticationError
from app.schemas.user import UserResponse

logger = logging.getLogger(__name__)

SESSION_USER_ID = "user_id"
SESSION_USER = "user"


def start_session(request: Request, user: UserResponse) -> None:
    request.session[SESSION_USER_ID] = str(user.id)
    request.session[SESSION_USER] = user.model_dump(mode="json")


def end_session(request: Request) -> None:
    request.session.clear()


def current_user(request: Request):
    """The logged-in user, or None."""
    if request.session.get(SESSION_USER_ID) and request.session.get(SESSION_USER):
        return UserResponse.model_validate(request.session[SESSION_USER])
    return None


async def require_admin(request: Request) -> UserResponse:
    """FastAPI dependency for every /admin/api route."""
    user = current_user(request)
    if user is None:
        logger.debug("Rejected unauthenticated request to %s", request.url.path)
        raise AuthenticationError()
    request.state.user = user
    return user
