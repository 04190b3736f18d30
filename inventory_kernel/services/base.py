"""
BaseService -- abstract base for kernel services that write.

Services receive a SQLAlchemy ``Session`` and use ``session.flush()``, never
``session.commit()``.  The caller (``session_scope()`` or a test harness)
owns commit and rollback, which is what makes multi-step operations such as
stock-in atomic.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from inventory_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    def __init__(self, session: Session):
        self.session = session
