"""OTP port: abstract interface for one-time code generation and checking."""

from abc import ABC, abstractmethod

from app.domain.models import ApplicationUser


class OTPServicePort(ABC):
    """Issues and verifies short-lived one-time codes for a user."""

    @abstractmethod
    async def generate(self, user: ApplicationUser) -> str:
        """Return a fresh code for ``user``."""
        ...

    @abstractmethod
    async def verify(self, user: ApplicationUser, code: str) -> bool:
        """Return True when ``code`` is currently valid for ``user``."""
        ...
