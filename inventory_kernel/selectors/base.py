"""
Module: inventory_kernel.selectors.base
Responsibility: Abstract base class for read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain DTOs.  MUST NOT import from services/.

Invariants enforced:
    - Read-only access: selectors never add, delete, flush or commit.
    - DTO return convention: selectors return frozen dataclasses or computed
      values, not ORM instances.
    - Session ownership: the caller owns the session and its transaction.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    def __init__(self, session: Session):
        self.session = session
