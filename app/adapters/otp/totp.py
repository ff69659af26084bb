"""Time-based one-time codes using pyotp."""

import logging

import pyotp
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import ApplicationUser
from app.ports.otp import OTPServicePort

logger = logging.getLogger(__name__)


class TOTPService(OTPServicePort):
    """
    OTP service backed by a per-user TOTP secret.

    The secret is provisioned on the first ``generate`` call and stored on
    the user record through the request's session. A code stays valid for
    one interval, plus one interval of drift on either side.
    """

    def __init__(
        self,
        session: AsyncSession,
        digits: int = 6,
        interval: int = 300,
        valid_window: int = 1,
    ) -> None:
        self._session = session
        self._digits = digits
        self._interval = interval
        self._valid_window = valid_window

    def _totp(self, secret: str) -> pyotp.TOTP:
        return pyotp.TOTP(secret, digits=self._digits, interval=self._interval)

    async def generate(self, user: ApplicationUser) -> str:
        if not user.otp_secret:
            user.otp_secret = pyotp.random_base32()
            self._session.add(user)
            await self._session.flush()
            logger.info("Provisioned OTP secret for user %s", user.id)
        return self._totp(user.otp_secret).now()

    async def verify(self, user: ApplicationUser, code: str) -> bool:
        if not user.otp_secret or not code:
            return False
        code = code.strip()
        if len(code) != self._digits or not code.isdigit():
            return False
        return self._totp(user.otp_secret).verify(code, valid_window=self._valid_window)
