"""
Bearer-token authentication and authorization.

Authentication runs as Starlette middleware: it turns a valid
``Authorization: Bearer <jwt>`` header into ``request.user`` and
``request.auth``. It never rejects a request; a missing, invalid or revoked token
leaves the request anonymous. A token is revoked once the user's
security stamp changes (role membership updates) or the user is gone.

Authorization runs afterwards as FastAPI dependencies attached to routers:
``require_authenticated`` answers 401 for anonymous callers and
``require_roles`` answers 403 for callers lacking the role.
"""

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

import bcrypt
from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.authentication import (
    AuthCredentials,
    AuthenticationBackend,
    BaseUser,
    UnauthenticatedUser,
)
from starlette.requests import HTTPConnection

from app.config import Settings
from app.database import Database, get_session
from app.domain.models import ApplicationUser

logger = logging.getLogger(__name__)

BEARER_DESCRIPTION = "Enter 'Bearer' [space] and your valid JWT token."

# Documents the scheme on protected operations; enforcement is done below.
bearer_scheme = HTTPBearer(
    scheme_name="Bearer",
    bearerFormat="JWT",
    description=BEARER_DESCRIPTION,
    auto_error=False,
)


# ── Passwords ──────────────────────────────────────


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


# ── Tokens ─────────────────────────────────────────


def create_access_token(user: ApplicationUser, settings: Settings) -> str:
    """Issue a signed JWT carrying the user's identity and role names."""
    now = datetime.now(timezone.utc)
    claims = {
        "sub": str(user.id),
        "unique_name": user.user_name,
        "email": user.email,
        "roles": sorted(role.name for role in user.roles),
        "stamp": user.security_stamp,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=settings.JWT_EXPIRE_MINUTES)).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, settings: Settings) -> dict:
    """Verify signature, expiry, issuer and audience. Raises JWTError."""
    return jwt.decode(
        token,
        settings.JWT_SECRET_KEY,
        algorithms=[settings.JWT_ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        issuer=settings.JWT_ISSUER,
    )


# ── Authentication middleware backend ──────────────


class TokenUser(BaseUser):
    """Principal reconstructed from verified token claims."""

    def __init__(self, user_id: UUID, user_name: str, email: str | None, roles: list[str]):
        self.id = user_id
        self.user_name = user_name
        self.email = email
        self.roles = roles

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self.user_name

    @property
    def identity(self) -> str:
        return str(self.id)


class JWTAuthBackend(AuthenticationBackend):
    """Accepts tokens whose security stamp still matches the stored user."""

    def __init__(self, settings: Settings, database: Database) -> None:
        self._settings = settings
        self._database = database

    async def authenticate(self, conn: HTTPConnection):
        header = conn.headers.get("Authorization")
        if not header:
            return None

        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not token.strip():
            return None

        try:
            payload = decode_access_token(token.strip(), self._settings)
            user_id = UUID(payload["sub"])
        except ExpiredSignatureError:
            logger.info("Bearer token expired")
            return None
        except (JWTError, KeyError, ValueError) as e:
            logger.warning("Bearer token rejected: %s", e)
            return None

        if not await self._stamp_is_current(user_id, payload.get("stamp")):
            logger.info("Bearer token for %s was revoked", user_id)
            return None

        roles = list(payload.get("roles") or [])
        user = TokenUser(
            user_id=user_id,
            user_name=payload.get("unique_name", ""),
            email=payload.get("email"),
            roles=roles,
        )
        return AuthCredentials(["authenticated", *roles]), user

    async def _stamp_is_current(self, user_id: UUID, stamp: str | None) -> bool:
        # Missing users and rotated stamps both revoke the token.
        async with self._database.session_factory() as session:
            current = await session.scalar(
                select(ApplicationUser.security_stamp).where(ApplicationUser.id == user_id)
            )
        return current is not None and current == stamp


# ── Authorization dependencies ─────────────────────


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def require_authenticated(
    request: Request,
    _credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
) -> TokenUser:
    """Reject anonymous callers with 401."""
    user = request.user
    if isinstance(user, UnauthenticatedUser) or not user.is_authenticated:
        raise _unauthorized()
    return user


def require_roles(*roles: str):
    """Dependency factory: caller must hold at least one of ``roles``."""

    async def checker(principal: TokenUser = Depends(require_authenticated)) -> TokenUser:
        if not set(roles) & set(principal.roles):
            logger.info(
                "Access denied for %s: requires one of %s", principal.identity, roles
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient role",
            )
        return principal

    return checker


async def get_current_user(
    principal: TokenUser = Depends(require_authenticated),
    session: AsyncSession = Depends(get_session),
) -> ApplicationUser:
    """Load the authenticated user's record; 401 if it no longer exists."""
    user = await session.get(ApplicationUser, principal.id)
    if user is None:
        raise _unauthorized("User no longer exists")
    return user
