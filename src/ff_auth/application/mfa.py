"""TOTP-based MFA: setup, enable, verify, and the sensitive-operation gate.

Setup stages a fresh secret in the cache (``mfa:pending:{user_id}``) with a
TTL; only a successful ``enable`` binds it to the user row. Codes are the
standard RFC 6238 flavour: 30s step, 6 digits, one step of drift either way.
"""

import logging
from dataclasses import dataclass

import pyotp

from src.ff_auth.domain.models import User
from src.ff_auth.domain.repository import UserRepositoryProtocol
from src.ff_common.cache import CacheService
from src.ff_common.errors import AuthError, AuthErrorKind, NotFoundError, ValidationError

logger = logging.getLogger("ff.auth")

_PENDING_PREFIX = "mfa:pending:"
_VALID_WINDOW = 1


@dataclass
class MfaSetup:
    secret: str
    otpauth_uri: str


def _check_code(secret: str, code: str) -> bool:
    try:
        return pyotp.TOTP(secret).verify(code, valid_window=_VALID_WINDOW)
    except (TypeError, ValueError) as exc:
        # corrupt base32 secret
        logger.error("TOTP verification error: %s", exc)
        return False


class MfaService:
    def __init__(
        self,
        cache: CacheService,
        users: UserRepositoryProtocol,
        issuer: str,
        setup_ttl_seconds: int,
    ) -> None:
        self._cache = cache
        self._users = users
        self._issuer = issuer
        self._setup_ttl_seconds = setup_ttl_seconds

    async def setup(self, user_id: str) -> MfaSetup:
        user = await self._users.get_user(user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        secret = pyotp.random_base32()
        uri = pyotp.TOTP(secret).provisioning_uri(name=user.username, issuer_name=self._issuer)
        await self._cache.set(f"{_PENDING_PREFIX}{user_id}", secret, self._setup_ttl_seconds)
        return MfaSetup(secret=secret, otpauth_uri=uri)

    async def verify(self, user_id: str, code: str) -> bool:
        """True if ``code`` matches the staged secret or the bound one."""
        staged = await self._cache.get(f"{_PENDING_PREFIX}{user_id}")
        if isinstance(staged, str) and _check_code(staged, code):
            return True

        user = await self._users.get_user(user_id)
        if user is not None and user.mfa_secret:
            return _check_code(user.mfa_secret, code)
        return False

    async def enable(self, user_id: str, code: str) -> User:
        staged = await self._cache.get(f"{_PENDING_PREFIX}{user_id}")
        if not isinstance(staged, str):
            raise ValidationError("MFA setup expired")
        if not _check_code(staged, code):
            raise ValidationError("Invalid MFA token")

        user = await self._users.enable_mfa(user_id, staged)
        if user is None:
            raise NotFoundError("User", user_id)
        await self._cache.delete(f"{_PENDING_PREFIX}{user_id}")
        logger.info("MFA enabled for user %s", user_id)
        return user

    def require_for_sensitive_op(self, user: User, code: str | None) -> None:
        """No-op unless the user has MFA enabled; then a valid code is mandatory."""
        if not user.mfa_enabled:
            return
        if not code:
            raise AuthError(AuthErrorKind.MFA_REQUIRED)
        if not user.mfa_secret or not _check_code(user.mfa_secret, code):
            raise AuthError(AuthErrorKind.MFA_INVALID)
