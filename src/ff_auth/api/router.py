"""Auth API router: register, login, refresh, logout, me, MFA.

Bodies are plain camelCase JSON; errors go through the global AppError
handler.
"""

from fastapi import APIRouter, Depends, status

from src.container import Services
from src.ff_auth.application.schemas import (
    LoginRequest,
    LoginResponse,
    LogoutRequest,
    MfaCodeRequest,
    MfaSetupResponse,
    MfaVerifyResponse,
    RefreshRequest,
    RegisterRequest,
    SuccessResponse,
    TokenPairResponse,
    UserInfo,
)
from src.ff_auth.auth.dependencies import get_bearer_token, get_current_user, get_services
from src.ff_auth.auth.jwt_handler import TokenKind
from src.ff_auth.domain.models import TokenPair, User

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_body(services: Services, pair: TokenPair) -> dict:
    return TokenPairResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=services.jwt.lifetime_seconds(TokenKind.ACCESS),
    ).model_dump(by_alias=True)


@router.post("/register", status_code=status.HTTP_201_CREATED, summary="User registration")
async def register(
    body: RegisterRequest,
    services: Services = Depends(get_services),
) -> dict:
    user = await services.user_service.register(body.username, body.password)
    return UserInfo.from_domain(user).model_dump(by_alias=True)


@router.post("/login", summary="User login")
async def login(
    body: LoginRequest,
    services: Services = Depends(get_services),
) -> dict:
    user, pair = await services.user_service.login(body.username, body.password)
    return LoginResponse(
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=services.jwt.lifetime_seconds(TokenKind.ACCESS),
        user=UserInfo.from_domain(user),
    ).model_dump(by_alias=True)


@router.post("/refresh", summary="Exchange a refresh token for a new token pair")
async def refresh(
    body: RefreshRequest,
    services: Services = Depends(get_services),
) -> dict:
    pair = await services.tokens.refresh(body.refresh_token)
    return _token_body(services, pair)


@router.post("/logout", summary="Revoke this session or every session")
async def logout(
    body: LogoutRequest | None = None,
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    body = body or LogoutRequest()
    await services.user_service.logout(
        user, token, all_devices=body.all_devices, refresh_token=body.refresh_token
    )
    return SuccessResponse().model_dump(by_alias=True)


@router.get("/me", summary="Current user")
async def me(user: User = Depends(get_current_user)) -> dict:
    return UserInfo.from_domain(user).model_dump(by_alias=True)


@router.post("/mfa/setup", summary="Stage a new TOTP secret")
async def mfa_setup(
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    setup = await services.mfa.setup(user.id)
    return MfaSetupResponse(secret=setup.secret, otpauth_uri=setup.otpauth_uri).model_dump(
        by_alias=True
    )


@router.post("/mfa/enable", summary="Bind the staged TOTP secret")
async def mfa_enable(
    body: MfaCodeRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    updated = await services.mfa.enable(user.id, body.code)
    return UserInfo.from_domain(updated).model_dump(by_alias=True)


@router.post("/mfa/verify", summary="Check a TOTP code")
async def mfa_verify(
    body: MfaCodeRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
) -> dict:
    valid = await services.mfa.verify(user.id, body.code)
    return MfaVerifyResponse(valid=valid).model_dump(by_alias=True)
