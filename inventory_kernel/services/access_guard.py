"""
Access guard implementations.

FarmOwnershipGuard is the production guard: a user may operate on a farm
they own.  StaticAccessGuard grants a fixed set of farms and is meant for
embedding the kernel behind another authorization layer, and for tests.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from inventory_kernel.domain.access import AccessGuard
from inventory_kernel.exceptions import ForbiddenError
from inventory_kernel.logging_config import get_logger
from inventory_kernel.models.farm import Farm

logger = get_logger("services.access_guard")


def _deny(actor_id: UUID, farm_id: UUID | None, reason: str) -> ForbiddenError:
    logger.warning(
        "farm_access_denied",
        extra={
            "actor_id": str(actor_id),
            "farm_id": str(farm_id) if farm_id else None,
            "reason": reason,
        },
    )
    return ForbiddenError(
        actor_id=str(actor_id),
        farm_id=str(farm_id) if farm_id else None,
        reason=reason,
    )


class FarmOwnershipGuard(AccessGuard):
    """Grants access to the farms whose owner_user_id is the acting user."""

    def __init__(self, session: Session, user_id: UUID):
        self._session = session
        self._user_id = user_id

    def current_user_id(self) -> UUID:
        return self._user_id

    def assert_can_access_farm(self, farm_id: UUID | None) -> None:
        if farm_id is None:
            raise _deny(self._user_id, None, "warehouse is not attached to a farm")

        owner_id = self._session.execute(
            select(Farm.owner_user_id).where(Farm.id == farm_id)
        ).scalar_one_or_none()

        if owner_id is None:
            raise _deny(self._user_id, farm_id, "farm does not exist")
        if owner_id != self._user_id:
            raise _deny(self._user_id, farm_id, "user does not own the farm")

    def accessible_farm_ids(self) -> list[UUID]:
        return list(
            self._session.execute(
                select(Farm.id)
                .where(Farm.owner_user_id == self._user_id)
                .order_by(Farm.name)
            ).scalars()
        )


class StaticAccessGuard(AccessGuard):
    """Grants a fixed set of farm ids to a fixed user."""

    def __init__(self, user_id: UUID, farm_ids: list[UUID] | None = None):
        self._user_id = user_id
        self._farm_ids = list(farm_ids or [])

    def current_user_id(self) -> UUID:
        return self._user_id

    def assert_can_access_farm(self, farm_id: UUID | None) -> None:
        if farm_id is None:
            raise _deny(self._user_id, None, "warehouse is not attached to a farm")
        if farm_id not in self._farm_ids:
            raise _deny(self._user_id, farm_id, "farm is not granted to user")

    def accessible_farm_ids(self) -> list[UUID]:
        return list(self._farm_ids)
