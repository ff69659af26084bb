"""Administrative routes, restricted to the Admin role."""

from fastapi import APIRouter, Depends

from app.api.mapping import to_role_response
from app.api.middleware.auth import require_roles
from app.api.schemas import RoleResponse
from app.dependencies import IdentityDep
from app.services.identity import ADMIN_ROLE

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    dependencies=[Depends(require_roles(ADMIN_ROLE))],
)


@router.get("/roles", response_model=list[RoleResponse])
async def list_roles(identity: IdentityDep) -> list[RoleResponse]:
    return [to_role_response(role) for role in await identity.list_roles()]
