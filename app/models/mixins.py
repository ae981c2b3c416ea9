"""
Column mixins shared by workflow entities.

AuditMixin records which actor touched a row and when. SoftDeleteMixin
backs the recoverable delete of the record store.
"""

from sqlalchemy import Column, String, DateTime, func


class AuditMixin:
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    created_by = Column(String, nullable=True)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    updated_by = Column(String, nullable=True)


class SoftDeleteMixin:
    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)
    deleted_by = Column(String, nullable=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
