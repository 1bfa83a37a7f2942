"""FastAPI dependencies: service container access and get_current_user.

Usage in any protected router:
    from src.ff_auth.auth.dependencies import get_current_user

    @router.get("/protected")
    async def protected(user: User = Depends(get_current_user)):
        ...
"""

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.container import Services
from src.ff_auth.domain.models import User
from src.ff_common.errors import AuthError, AuthErrorKind

# auto_error=False: a missing header must surface as our 401 TOKEN_MISSING,
# not FastAPI's default 403
bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> Services:
    return request.app.state.services


async def get_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthError(AuthErrorKind.TOKEN_MISSING)
    return credentials.credentials


async def get_current_user(
    token: str = Depends(get_bearer_token),
    services: Services = Depends(get_services),
) -> User:
    """Verify the Bearer access token and return its (current) user.

    Raises AuthError: 401 for missing/expired/revoked/version-mismatched
    tokens, 403 for a bad signature or wrong token type.
    """
    return await services.tokens.verify_access(token)
