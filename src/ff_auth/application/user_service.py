"""User domain service: register, login, logout."""

import logging

from src.ff_auth.application.token_service import TokenService
from src.ff_auth.auth.password import hash_password, verify_password
from src.ff_auth.domain.models import TokenPair, User
from src.ff_auth.domain.repository import UserRepositoryProtocol
from src.ff_common.errors import AuthError, AuthErrorKind

logger = logging.getLogger("ff.auth")


class UserService:
    def __init__(self, users: UserRepositoryProtocol, tokens: TokenService) -> None:
        self._users = users
        self._tokens = tokens

    async def register(self, username: str, password: str) -> User:
        user = await self._users.create_user(username, hash_password(password))
        logger.info("Registered user %s", user.id)
        return user

    async def login(self, username: str, password: str) -> tuple[User, TokenPair]:
        """Authenticate and issue a token pair.

        Unknown user and wrong password raise the same error so usernames
        cannot be enumerated.
        """
        user = await self._users.get_user_by_username(username)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError(AuthErrorKind.INVALID_CREDENTIALS)

        return user, await self._tokens.issue(user.id)

    async def logout(
        self,
        user: User,
        access_token: str,
        all_devices: bool = True,
        refresh_token: str | None = None,
    ) -> None:
        if all_devices:
            await self._tokens.revoke_all(user.id)
        elif refresh_token is not None:
            await self._tokens.revoke_session(access_token, refresh_token, user.id)
        else:
            await self._tokens.revoke(access_token, user.id)
