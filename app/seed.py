"""Idempotent seeding of the identity store."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.models import Role
from app.services.identity import ADMIN_ROLE, DEFAULT_ROLE, normalize

logger = logging.getLogger(__name__)

SEED_ROLES = (ADMIN_ROLE, DEFAULT_ROLE)


async def seed_identity(session: AsyncSession) -> list[str]:
    """Create the built-in roles that are missing. Returns the names created."""
    result = await session.execute(select(Role.normalized_name))
    existing = set(result.scalars().all())

    created: list[str] = []
    for name in SEED_ROLES:
        if normalize(name) not in existing:
            session.add(Role(name=name, normalized_name=normalize(name)))
            created.append(name)

    await session.commit()
    if created:
        logger.info("Seeded roles: %s", ", ".join(created))
    return created
