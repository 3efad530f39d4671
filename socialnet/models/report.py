"""Content report submitted by a user or admin, resolved by moderators."""

from datetime import datetime
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Index, Integer, String, Text, TIMESTAMP

from ..database import Base


class ReportStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class ReportSeverity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)

    # Target is a weak pointer: reports outlive the reported content
    content_id = Column(String(64), nullable=False, index=True)
    content_type = Column(String(20), nullable=False, index=True)
    reporter_id = Column(Integer, nullable=False, index=True)

    reason = Column(Text, nullable=False)
    severity = Column(String(20), nullable=False, default=ReportSeverity.MEDIUM.value, index=True)
    status = Column(String(20), nullable=False, default=ReportStatus.PENDING.value, index=True)

    moderator_notes = Column(Text)
    handled_by = Column(Integer)
    handled_at = Column(TIMESTAMP)

    created_at = Column(TIMESTAMP, default=datetime.utcnow, index=True)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'resolved', 'rejected')", name="check_report_status"),
        CheckConstraint("severity IN ('low', 'medium', 'high', 'critical')", name="check_report_severity"),
        Index("ix_reports_status_created", "status", "created_at"),
    )
