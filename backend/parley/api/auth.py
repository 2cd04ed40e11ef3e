"""
Authentication endpoints (signup/login/logout) with cookie sessions.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Response, status
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from parley.api.deps import AuthSvc, CurrentUser, ensure_session_secret
from parley.core.config import Settings, get_settings
from parley.core.security import create_access_token, session_max_age_seconds
from parley.models.user import UserPublic

router = APIRouter()


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field("", max_length=255, validation_alias=AliasChoices("full_name", "fullName"))
    email: str = Field("", max_length=255)
    password: str = Field("", max_length=128)


class LoginRequest(BaseModel):
    email: str = Field("", max_length=255)
    password: str = Field("", max_length=128)


class UpdateProfileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    profile_pic: Optional[str] = Field(
        None, validation_alias=AliasChoices("profile_pic", "profilePic")
    )


class StatusResponse(BaseModel):
    message: str


def set_session_cookie(response: Response, user_id: str, settings: Settings) -> str:
    """Mint a session token and attach it as an HTTP-only cookie."""
    ensure_session_secret(settings)
    token = create_access_token(user_id, settings)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=session_max_age_seconds(settings),
        httponly=True,
        samesite="strict",
        secure=settings.secure_cookies,
    )
    return token


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        samesite="strict",
        secure=settings.secure_cookies,
    )


@router.post("/signup", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, response: Response, auth_service: AuthSvc) -> UserPublic:
    settings = get_settings()
    ensure_session_secret(settings)
    user = await auth_service.signup(data.full_name, data.email, data.password)
    set_session_cookie(response, str(user.id), settings)
    return user


@router.post("/login", response_model=UserPublic)
async def login(data: LoginRequest, response: Response, auth_service: AuthSvc) -> UserPublic:
    settings = get_settings()
    ensure_session_secret(settings)
    user = await auth_service.login(data.email, data.password)
    set_session_cookie(response, str(user.id), settings)
    return user


@router.post("/logout", response_model=StatusResponse)
async def logout(response: Response) -> StatusResponse:
    # Stateless: the token simply stops being sent
    clear_session_cookie(response, get_settings())
    return StatusResponse(message="Logged out successfully")


@router.put("/update-profile", response_model=UserPublic)
async def update_profile(
    data: UpdateProfileRequest,
    user: CurrentUser,
    auth_service: AuthSvc,
) -> UserPublic:
    return await auth_service.update_profile(user.id, data.profile_pic)


@router.get("/check", response_model=UserPublic)
async def check_auth(user: CurrentUser) -> UserPublic:
    return user.to_public()
