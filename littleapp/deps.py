"""
Little Application: Request Dependencies
===========================================

What:  FastAPI dependencies: the acting user from a Bearer token or the
       `token` cookie, role requirements, the parsed list query, and the
       photo store.
How:   HTTPBearer extracts the token (the Authorization header wins over
       the cookie); decode_jwt verifies it with the app's JWT_SECRET; the
       user row is loaded from the request's DB session.
"""

import uuid

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from littleapp.config import Settings, get_settings
from littleapp.database import get_db_session
from littleapp.exceptions import AuthenticationError, AuthorizationError
from littleapp.models.user import User
from littleapp.query import ListQuery, parse_list_query
from littleapp.security import decode_jwt
from littleapp.services.file_service import FileService

bearer = HTTPBearer(auto_error=False)

# Login and register also set the token in this cookie
TOKEN_COOKIE = "token"


async def get_current_user(
    request: Request,
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
    settings: Settings = Depends(get_settings),
    db: AsyncSession = Depends(get_db_session),
) -> User:
    token = creds.credentials if creds else request.cookies.get(TOKEN_COOKIE)
    if not token:
        raise AuthenticationError()
    try:
        payload = decode_jwt(token, settings.jwt_secret)
        user_id = uuid.UUID(str(payload.get("sub")))
    except (JWTError, ValueError):
        raise AuthenticationError(message="Invalid or expired token")

    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError(message="Token user no longer exists")
    return user


def require_role(*roles: str):
    """Dependency factory: the current user must hold one of `roles`."""
    async def _inner(user: User = Depends(get_current_user)) -> User:
        if user.role not in roles:
            raise AuthorizationError(
                message=f"User role '{user.role}' is not authorized to access this route",
                user_id=str(user.id),
            )
        return user
    return _inner


def get_list_query(request: Request, settings: Settings = Depends(get_settings)) -> ListQuery:
    """Parse the raw query string into a ListQuery using the app's page limits."""
    return parse_list_query(
        request.query_params.multi_items(),
        default_limit=settings.default_page_limit,
        max_limit=settings.max_page_limit,
    )


def get_file_service(settings: Settings = Depends(get_settings)) -> FileService:
    return FileService(settings.file_upload_path, settings.max_file_upload)
