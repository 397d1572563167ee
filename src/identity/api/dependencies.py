"""FastAPI dependencies resolving the calling user."""

from collections.abc import Callable

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from identity.auth import TokenVerifier
from identity.user.user import User, UserRepository, UserRole
from shared.api import get_database
from shared.errors import Forbidden, Unauthorized

_bearer = HTTPBearer(auto_error=False)


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
) -> User:
    """Verify the bearer token and map its subject to a local user."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("missing bearer token")

    external_id = get_token_verifier(request).verify(credentials.credentials)
    with get_database(request).transaction() as session:
        return UserRepository(session).get_by_external_id(external_id)


def require_role(*roles: UserRole) -> Callable[..., User]:
    """Dependency factory admitting only callers holding one of ``roles``."""
    allowed = ", ".join(role.value for role in roles)

    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            raise Forbidden(f"{allowed} access required")
        return current_user

    return _checker
