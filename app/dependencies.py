"""
Scoped service providers.

Each provider builds a fresh instance per request; FastAPI caches a
dependency's value for the duration of one request, so every consumer in
the same request shares it. Tests replace them through
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.otp.totp import TOTPService
from app.adapters.storage.local import LocalStorageAdapter
from app.adapters.storage.s3 import S3StorageAdapter
from app.config import Settings, StorageBackend
from app.database import get_session
from app.ports.otp import OTPServicePort
from app.ports.storage import StoragePort
from app.services.identity import IdentityService, PasswordPolicy


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_password_policy(request: Request) -> PasswordPolicy:
    return request.app.state.password_policy


def get_otp_service(
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_app_settings),
) -> OTPServicePort:
    return TOTPService(
        session,
        digits=settings.OTP_DIGITS,
        interval=settings.OTP_INTERVAL_SECONDS,
    )


def get_storage_service(settings: Settings = Depends(get_app_settings)) -> StoragePort:
    if settings.STORAGE_BACKEND == StorageBackend.S3:
        return S3StorageAdapter(
            endpoint_url=settings.S3_ENDPOINT_URL,
            access_key=settings.S3_ACCESS_KEY,
            secret_key=settings.S3_SECRET_KEY,
            bucket=settings.S3_BUCKET,
        )
    return LocalStorageAdapter(
        settings.STORAGE_LOCAL_PATH,
        public_base_url=settings.STORAGE_PUBLIC_BASE_URL,
    )


def get_identity_service(
    session: AsyncSession = Depends(get_session),
    policy: PasswordPolicy = Depends(get_password_policy),
    settings: Settings = Depends(get_app_settings),
) -> IdentityService:
    return IdentityService(session, policy, settings)


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]
OTPServiceDep = Annotated[OTPServicePort, Depends(get_otp_service)]
StorageDep = Annotated[StoragePort, Depends(get_storage_service)]
IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]
