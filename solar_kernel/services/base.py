"""
BaseService -- abstract base for kernel services.

Responsibility:
    Common constructor and session-handling contract for every service in
    the kernel.  Services receive a SQLAlchemy ``Session`` and persist with
    ``session.flush()``; they never commit or roll back.

Architecture position:
    Kernel > Services -- imperative shell around the pure engines.

Invariants enforced:
    Transaction boundaries belong to the caller (``session_scope`` or a
    test harness), so several service calls can share one atomic unit.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from solar_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel services.

    Non-goals:
        - Does NOT manage transaction lifecycle (commit/rollback).
    """

    def __init__(self, session: Session):
        self.session = session
