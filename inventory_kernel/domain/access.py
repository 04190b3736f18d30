"""
AccessGuard -- the identity/authorization capability the core consumes.

Every entry point receives one guard by constructor injection and calls it
before touching the catalog or the ledger.  How the current user is
established (sessions, tokens) is outside the kernel.
"""

from abc import ABC, abstractmethod
from uuid import UUID


class AccessGuard(ABC):
    """
    Contract:
        - ``current_user_id()`` returns the acting user.
        - ``assert_can_access_farm(farm_id)`` returns None when the acting
          user may operate on the farm and raises ForbiddenError otherwise.
          A None farm id (a warehouse not attached to any farm) is always
          forbidden.
        - ``accessible_farm_ids()`` lists the farms the user may operate on.
    """

    @abstractmethod
    def current_user_id(self) -> UUID:
        ...

    @abstractmethod
    def assert_can_access_farm(self, farm_id: UUID | None) -> None:
        ...

    @abstractmethod
    def accessible_farm_ids(self) -> list[UUID]:
        ...
