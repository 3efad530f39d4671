"""Append-only record of administrative actions."""

from datetime import datetime

from sqlalchemy import JSON, Column, Index, Integer, String, TIMESTAMP

from ..database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)

    admin_id = Column(Integer, nullable=False, index=True)
    action = Column(String(100), nullable=False, index=True)
    target_type = Column(String(50), nullable=False, index=True)
    target_id = Column(String(64))
    details = Column(JSON, nullable=False, default=dict)
    ip_address = Column(String(64))

    timestamp = Column(TIMESTAMP, default=datetime.utcnow, nullable=False, index=True)

    __table_args__ = (
        Index("ix_audit_admin_timestamp", "admin_id", "timestamp"),
    )
