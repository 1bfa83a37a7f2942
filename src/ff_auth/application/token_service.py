"""Token lifecycle: issue, verify, refresh, revoke.

Token states: issued -> valid -> (expired | revoked-by-version |
revoked-by-blacklist). Nothing transitions back to valid.

Access verification order:
  1. signature + expiry        -> INVALID_TOKEN (403) / TOKEN_EXPIRED (401)
  2. blacklist                 -> TOKEN_REVOKED (401)
  3. user lookup               -> USER_NOT_FOUND (401)
  4. embedded version == store -> VERSION_MISMATCH (401)

Only TOKEN_EXPIRED is worth a silent refresh on the client; every other
failure means re-authenticate.

Refresh runs the same blacklist + version checks, so ``revoke_all`` also
kills outstanding refresh tokens. A blacklist write that fails falls back
to ``revoke_all``, so a revocation is never silently lost.
"""

import logging

from src.ff_auth.application.blacklist import TokenBlacklist
from src.ff_auth.application.token_version import TokenVersionStore
from src.ff_auth.auth.jwt_handler import JwtHandler, TokenClaims, TokenKind
from src.ff_auth.domain.models import TokenPair, User
from src.ff_auth.domain.repository import UserRepositoryProtocol
from src.ff_common.errors import AuthError, AuthErrorKind

logger = logging.getLogger("ff.auth")


class TokenService:
    def __init__(
        self,
        jwt_handler: JwtHandler,
        users: UserRepositoryProtocol,
        versions: TokenVersionStore,
        blacklist: TokenBlacklist,
    ) -> None:
        self._jwt = jwt_handler
        self._users = users
        self._versions = versions
        self._blacklist = blacklist

    async def issue(self, user_id: str) -> TokenPair:
        version = await self._versions.get_version(user_id)
        return TokenPair(
            access_token=self._jwt.create_token(user_id, TokenKind.ACCESS, version),
            refresh_token=self._jwt.create_token(user_id, TokenKind.REFRESH, version),
        )

    async def verify_access(self, token: str) -> User:
        claims = self._jwt.decode_token(token, TokenKind.ACCESS)
        return await self._check_revocation(token, claims)

    async def refresh(self, refresh_token: str) -> TokenPair:
        claims = self._jwt.decode_token(refresh_token, TokenKind.REFRESH)
        user = await self._check_revocation(refresh_token, claims)
        return await self.issue(user.id)

    async def revoke_all(self, user_id: str) -> int:
        """Invalidate every outstanding token of the user, on every device."""
        version = await self._versions.increment(user_id)
        logger.info("Token version bumped to %d for user %s", version, user_id)
        return version

    async def revoke(self, token: str, user_id: str) -> None:
        """Invalidate one token only."""
        await self._revoke_tokens([token], user_id)

    async def revoke_session(self, access_token: str, refresh_token: str, user_id: str) -> None:
        """Single-device logout: blacklist the session's access and refresh token.

        An already expired refresh token is skipped; one that belongs to
        another user, or is not a refresh token at all, is rejected.
        """
        tokens = [access_token]
        try:
            claims = self._jwt.decode_token(refresh_token, TokenKind.REFRESH)
        except AuthError as exc:
            if not exc.is_expired:
                raise
        else:
            if claims.user_id != user_id:
                raise AuthError(AuthErrorKind.INVALID_TOKEN)
            tokens.append(refresh_token)
        await self._revoke_tokens(tokens, user_id)

    async def _revoke_tokens(self, tokens: list[str], user_id: str) -> None:
        written = [await self._blacklist.blacklist(token, user_id) for token in tokens]
        if all(written):
            logger.info("Blacklisted %d token(s) for user %s", len(tokens), user_id)
            return
        # the blacklist is down; the version counter lives in the user store
        logger.warning("Token blacklist write failed for user %s; revoking every session", user_id)
        await self.revoke_all(user_id)

    async def _check_revocation(self, token: str, claims: TokenClaims) -> User:
        if await self._blacklist.is_blacklisted(token):
            raise AuthError(AuthErrorKind.TOKEN_REVOKED)

        user = await self._users.get_user(claims.user_id)
        if user is None:
            raise AuthError(AuthErrorKind.USER_NOT_FOUND)

        if claims.version != user.token_version:
            raise AuthError(AuthErrorKind.VERSION_MISMATCH)

        return user
