"""Registration, sign-in, profile and OTP email confirmation routes."""

import logging

from fastapi import APIRouter, Depends, status

from app.api.mapping import to_user_response
from app.api.middleware.auth import get_current_user, require_authenticated
from app.api.schemas import (
    LoginRequest,
    OTPSentResponse,
    OTPVerifyRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from app.dependencies import IdentityDep, OTPServiceDep, SettingsDep
from app.domain.models import ApplicationUser
from app.exceptions import InvalidOTPError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])

# Routes below require a bearer token.
protected = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
    dependencies=[Depends(require_authenticated)],
)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, identity: IdentityDep) -> UserResponse:
    """Create an account in the default role."""
    user = await identity.register(data.user_name, data.email, data.password)
    return to_user_response(user)


@router.post("/login", response_model=TokenResponse)
async def login(
    data: LoginRequest, identity: IdentityDep, settings: SettingsDep
) -> TokenResponse:
    token = await identity.authenticate(data.email, data.password)
    return TokenResponse(
        access_token=token,
        expires_in=settings.JWT_EXPIRE_MINUTES * 60,
    )


@protected.get("/me", response_model=UserResponse)
async def me(user: ApplicationUser = Depends(get_current_user)) -> UserResponse:
    return to_user_response(user)


@protected.post(
    "/otp",
    response_model=OTPSentResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def send_otp(
    otp: OTPServiceDep,
    settings: SettingsDep,
    user: ApplicationUser = Depends(get_current_user),
) -> OTPSentResponse:
    """Issue a one-time code for email confirmation."""
    code = await otp.generate(user)
    if settings.is_development:
        logger.info("OTP issued for %s: %s", user.email, code)
    else:
        logger.info("OTP issued for user %s", user.id)
    return OTPSentResponse()


@protected.post("/otp/verify", response_model=UserResponse)
async def verify_otp(
    data: OTPVerifyRequest,
    otp: OTPServiceDep,
    identity: IdentityDep,
    user: ApplicationUser = Depends(get_current_user),
) -> UserResponse:
    """Confirm the user's email with a previously issued code."""
    if not await otp.verify(user, data.code):
        raise InvalidOTPError()
    await identity.confirm_email(user)
    return to_user_response(user)
