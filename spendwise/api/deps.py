# spendwise/api/deps.py
from typing import Optional
from fastapi import Depends, Request
from fastapi.dependencies.models import Dependant
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi_users.db import SQLAlchemyUserDatabase

from spendwise.core.auth import User, UserManager, get_user_manager, get_jwt_strategy
from spendwise.core.database import AsyncSessionLocal
from spendwise.core.exceptions import AuthenticationError
from spendwise.core.storage import ReceiptStorage, get_receipt_storage

optional_security = HTTPBearer(auto_error=False)


def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """Bearer header first, then the ``access_token`` cookie."""
    if credentials and credentials.credentials:
        return credentials.credentials

    token = request.cookies.get("access_token")
    # Remove "Bearer " prefix if present in cookie
    if token and token.startswith("Bearer "):
        token = token[7:]
    return token or None


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    user_manager: UserManager = Depends(get_user_manager),
) -> User:
    """
    Resolve the authenticated user or fail with 401.

    Every protected route depends on this, so authentication is checked
    before any validation or ownership logic runs.
    """
    token = _extract_token(request, credentials)
    if not token:
        raise AuthenticationError("Not authenticated")

    user = await get_jwt_strategy().read_token(token, user_manager)
    if user is None:
        raise AuthenticationError("Invalid or expired token")
    if not user.is_active:
        raise AuthenticationError("Inactive user")
    return user


def _depends_on_current_user(dependant: Dependant) -> bool:
    return any(
        sub.call is get_current_user or _depends_on_current_user(sub)
        for sub in dependant.dependencies
    )


def route_requires_auth(request: Request) -> bool:
    """Whether the matched route resolves ``get_current_user``."""
    dependant = getattr(request.scope.get("route"), "dependant", None)
    return dependant is not None and _depends_on_current_user(dependant)


async def authenticate_request(request: Request) -> Optional[User]:
    """
    Resolve the caller outside of dependency injection.

    Used by the validation error handler, which runs before the route's own
    dependencies get a chance to reject an unauthenticated request.
    """
    token = _extract_token(request, await optional_security(request))
    if not token:
        return None

    async with AsyncSessionLocal() as session:
        user_manager = UserManager(SQLAlchemyUserDatabase(session, User))
        user = await get_jwt_strategy().read_token(token, user_manager)
    if user is None or not user.is_active:
        return None
    return user


def get_storage() -> ReceiptStorage:
    """Receipt storage for the current request; overridden in tests."""
    return get_receipt_storage()
