"""UserRepository — PostgreSQL implementation of UserRepositoryProtocol.

Each method opens its own session from the injected factory. Writes run
inside ``async with db.begin()`` and commit on exit.
"""

from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ff_auth.domain.models import User
from src.ff_common.database import translate_db_errors
from src.ff_common.errors import UsernameExistsError

_USER_COLUMNS = "id, username, password_hash, mfa_enabled, mfa_secret, token_version, created_at"

_GET_USER_SQL = text(f"SELECT {_USER_COLUMNS} FROM users WHERE id = CAST(:user_id AS UUID)")

_GET_USER_BY_USERNAME_SQL = text(f"SELECT {_USER_COLUMNS} FROM users WHERE username = :username")

_INSERT_USER_SQL = text(f"""
    INSERT INTO users (username, password_hash)
    VALUES (:username, :password_hash)
    RETURNING {_USER_COLUMNS}
""")

# Single statement: the increment is atomic even under concurrent logouts.
_INCREMENT_VERSION_SQL = text("""
    UPDATE users
    SET token_version = token_version + 1
    WHERE id = CAST(:user_id AS UUID)
    RETURNING token_version
""")

_ENABLE_MFA_SQL = text(f"""
    UPDATE users
    SET mfa_enabled = TRUE,
        mfa_secret = :secret
    WHERE id = CAST(:user_id AS UUID)
    RETURNING {_USER_COLUMNS}
""")


def _row_to_user(row: object) -> User:
    return User(
        id=str(row.id),  # type: ignore[attr-defined]
        username=row.username,  # type: ignore[attr-defined]
        password_hash=row.password_hash,  # type: ignore[attr-defined]
        mfa_enabled=row.mfa_enabled,  # type: ignore[attr-defined]
        mfa_secret=row.mfa_secret,  # type: ignore[attr-defined]
        token_version=row.token_version,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class UserRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_user(self, user_id: str) -> User | None:
        async with translate_db_errors("get_user"), self._session_factory() as db:
            result = await db.execute(_GET_USER_SQL, {"user_id": user_id})
            row = result.fetchone()
        return _row_to_user(row) if row else None

    async def get_user_by_username(self, username: str) -> User | None:
        async with translate_db_errors("get_user_by_username"), self._session_factory() as db:
            result = await db.execute(_GET_USER_BY_USERNAME_SQL, {"username": username})
            row = result.fetchone()
        return _row_to_user(row) if row else None

    async def create_user(self, username: str, password_hash: str) -> User:
        async with translate_db_errors("create_user"), self._session_factory() as db:
            try:
                async with db.begin():
                    result = await db.execute(
                        _INSERT_USER_SQL,
                        {"username": username, "password_hash": password_hash},
                    )
                    row = result.fetchone()
            except IntegrityError:
                # uq_users_username
                raise UsernameExistsError() from None
        return _row_to_user(row)

    async def increment_token_version(self, user_id: str) -> int:
        async with translate_db_errors("increment_token_version"), self._session_factory() as db:
            async with db.begin():
                result = await db.execute(_INCREMENT_VERSION_SQL, {"user_id": user_id})
                version = result.scalar_one_or_none()
        return int(version) if version is not None else 0

    async def enable_mfa(self, user_id: str, secret: str) -> User | None:
        async with translate_db_errors("enable_mfa"), self._session_factory() as db:
            async with db.begin():
                result = await db.execute(
                    _ENABLE_MFA_SQL, {"user_id": user_id, "secret": secret}
                )
                row = result.fetchone()
        return _row_to_user(row) if row else None
