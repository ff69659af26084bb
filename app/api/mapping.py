"""Explicit mapping from ORM records to response schemas."""

from app.api.schemas import RoleResponse, StoredFileResponse, UserResponse
from app.domain.models import ApplicationUser, Role


def to_user_response(user: ApplicationUser) -> UserResponse:
    return UserResponse(
        id=user.id,
        user_name=user.user_name,
        email=user.email,
        email_confirmed=bool(user.email_confirmed),
        roles=sorted(role.name for role in user.roles),
        created_at=user.created_at,
    )


def to_role_response(role: Role) -> RoleResponse:
    return RoleResponse(id=role.id, name=role.name)


def to_stored_file_response(
    key: str, url: str, size: int, content_type: str | None
) -> StoredFileResponse:
    return StoredFileResponse(key=key, url=url, size=size, content_type=content_type)
