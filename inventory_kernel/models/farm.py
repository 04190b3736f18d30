"""
Module: inventory_kernel.models.farm
Responsibility: ORM persistence for the farm-side catalog the inventory core
    reads but never writes: farms (the tenancy and ownership anchor), seasons
    and tasks (the attribution targets of OUT movements).
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - A season belongs to exactly one farm.
    - A task may exist without a season.  Movements referencing such a task
      are rejected upstream.

Audit relevance:
    Farm.owner_user_id is the input to the ownership-based access guard.
    Season and task ids on OUT movements tie consumption to a crop cycle.
"""

from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from inventory_kernel.db.base import TrackedBase, UUIDString


class Farm(TrackedBase):
    __tablename__ = "farms"

    __table_args__ = (Index("idx_farm_owner", "owner_user_id"),)

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    owner_user_id: Mapped[UUID] = mapped_column(UUIDString(), nullable=False)

    def __repr__(self) -> str:
        return f"<Farm {self.name} owner={self.owner_user_id}>"


class Season(TrackedBase):
    """A crop cycle on one farm."""

    __tablename__ = "seasons"

    __table_args__ = (Index("idx_season_farm", "farm_id"),)

    farm_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("farms.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Season {self.name} farm={self.farm_id}>"


class Task(TrackedBase):
    """Field work item; its season, when set, is adopted by OUT movements."""

    __tablename__ = "tasks"

    __table_args__ = (Index("idx_task_season", "season_id"),)

    season_id: Mapped[UUID | None] = mapped_column(
        UUIDString(),
        ForeignKey("seasons.id"),
        nullable=True,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Task {self.title} season={self.season_id}>"
