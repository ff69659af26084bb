"""User registration, sign-in and role membership."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.middleware.auth import create_access_token, hash_password, verify_password
from app.config import Settings
from app.domain.models import ApplicationUser, Role
from app.exceptions import (
    DuplicateUserError,
    InvalidCredentialsError,
    PasswordPolicyError,
)

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "User"
ADMIN_ROLE = "Admin"


def normalize(value: str) -> str:
    return value.strip().upper()


@dataclass(frozen=True)
class PasswordPolicy:
    """Password rules checked at registration."""

    required_length: int = 6
    require_digit: bool = False
    require_lowercase: bool = False
    require_uppercase: bool = False
    require_non_alphanumeric: bool = False

    def validate(self, password: str) -> list[str]:
        """Return the violated rules; empty when the password is acceptable."""
        errors: list[str] = []
        if len(password) < self.required_length:
            errors.append(f"Passwords must be at least {self.required_length} characters.")
        if self.require_digit and not any(c.isdigit() for c in password):
            errors.append("Passwords must have at least one digit ('0'-'9').")
        if self.require_lowercase and not any(c.islower() for c in password):
            errors.append("Passwords must have at least one lowercase ('a'-'z').")
        if self.require_uppercase and not any(c.isupper() for c in password):
            errors.append("Passwords must have at least one uppercase ('A'-'Z').")
        if self.require_non_alphanumeric and all(c.isalnum() for c in password):
            errors.append("Passwords must have at least one non alphanumeric character.")
        return errors


class IdentityService:
    """Handles user registration, authentication and role assignment."""

    def __init__(
        self, session: AsyncSession, policy: PasswordPolicy, settings: Settings
    ) -> None:
        self._session = session
        self._policy = policy
        self._settings = settings

    async def register(self, user_name: str, email: str, password: str) -> ApplicationUser:
        """Create a user in the default role. Raises on policy or duplicate failures."""
        errors = self._policy.validate(password)
        if errors:
            raise PasswordPolicyError(errors)

        if await self._find_existing(user_name, email):
            raise DuplicateUserError()

        role = await self.ensure_role(DEFAULT_ROLE)
        user = ApplicationUser(
            user_name=user_name.strip(),
            normalized_user_name=normalize(user_name),
            email=email.strip(),
            normalized_email=normalize(email),
            password_hash=hash_password(password),
            roles=[role],
        )
        # A concurrent registration can pass the check above; the unique
        # indexes decide.
        try:
            async with self._session.begin_nested():
                self._session.add(user)
        except IntegrityError:
            logger.info("Registration lost a race on a unique index")
            raise DuplicateUserError() from None
        logger.info("Registered user %s", user.id)
        return user

    async def _find_existing(self, user_name: str, email: str) -> ApplicationUser | None:
        result = await self._session.execute(
            select(ApplicationUser).where(
                or_(
                    ApplicationUser.normalized_email == normalize(email),
                    ApplicationUser.normalized_user_name == normalize(user_name),
                )
            )
        )
        return result.scalars().first()

    async def find_by_email(self, email: str) -> ApplicationUser | None:
        result = await self._session.execute(
            select(ApplicationUser).where(ApplicationUser.normalized_email == normalize(email))
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> str:
        """Check credentials and return a bearer token."""
        user = await self.find_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed sign-in attempt")
            raise InvalidCredentialsError()
        return create_access_token(user, self._settings)

    async def _find_role(self, name: str) -> Role | None:
        result = await self._session.execute(
            select(Role).where(Role.normalized_name == normalize(name))
        )
        return result.scalar_one_or_none()

    async def ensure_role(self, name: str) -> Role:
        """Return the named role, creating it if no request has yet."""
        role = await self._find_role(name)
        if role is not None:
            return role

        role = Role(name=name, normalized_name=normalize(name))
        try:
            async with self._session.begin_nested():
                self._session.add(role)
        except IntegrityError:
            # Created by another request since the lookup.
            role = await self._find_role(name)
            if role is None:
                raise
            return role
        logger.info("Created role %s", name)
        return role

    async def add_to_role(self, user: ApplicationUser, role_name: str) -> None:
        role = await self.ensure_role(role_name)
        if role not in user.roles:
            user.roles.append(role)
            user.security_stamp = uuid.uuid4().hex
            await self._session.flush()

    async def list_roles(self) -> list[Role]:
        result = await self._session.execute(select(Role).order_by(Role.name))
        return list(result.scalars().all())

    async def confirm_email(self, user: ApplicationUser) -> ApplicationUser:
        user.email_confirmed = True
        await self._session.flush()
        logger.info("Confirmed email for user %s", user.id)
        return user
