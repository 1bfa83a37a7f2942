"""Pydantic request/response schemas for ff_auth.

Wire format is camelCase; Python attributes stay snake_case.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from src.ff_auth.domain.models import User


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    username: str = Field(..., min_length=3, max_length=64, pattern=r"^[a-zA-Z0-9_.-]+$")
    password: str = Field(..., min_length=8, max_length=72)  # bcrypt input limit


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    all_devices: bool = True
    refresh_token: str | None = Field(None, min_length=1)

    @model_validator(mode="after")
    def _single_device_needs_refresh_token(self) -> "LogoutRequest":
        # single-device logout revokes the refresh token too
        if not self.all_devices and self.refresh_token is None:
            raise ValueError("refreshToken is required when allDevices is false")
        return self


class MfaCodeRequest(CamelModel):
    code: str = Field(..., min_length=6, max_length=6, pattern=r"^\d{6}$")


class UserInfo(CamelModel):
    id: str
    username: str
    mfa_enabled: bool

    @classmethod
    def from_domain(cls, user: User) -> "UserInfo":
        return cls(id=user.id, username=user.username, mfa_enabled=user.mfa_enabled)


class TokenPairResponse(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int


class LoginResponse(TokenPairResponse):
    user: UserInfo


class MfaSetupResponse(CamelModel):
    secret: str
    otpauth_uri: str


class MfaVerifyResponse(CamelModel):
    valid: bool


class SuccessResponse(CamelModel):
    success: bool = True
