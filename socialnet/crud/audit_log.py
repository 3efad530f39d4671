"""CRUD operations for the append-only audit log."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from socialnet.crud.base import CRUDBase
from socialnet.models.audit_log import AuditLog


class CRUDAuditLog(CRUDBase[AuditLog, dict, dict]):

    def append(
        self,
        db: Session,
        *,
        admin_id: int,
        action: str,
        target_type: str,
        target_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> AuditLog:
        """Insert a new entry. Existing entries are never touched."""
        entry = AuditLog(
            admin_id=admin_id,
            action=action,
            target_type=target_type,
            target_id=str(target_id) if target_id is not None else None,
            details=dict(details or {}),
            ip_address=ip_address,
            timestamp=datetime.utcnow(),
        )
        try:
            db.add(entry)
            db.commit()
            db.refresh(entry)
        except Exception:
            db.rollback()
            raise
        return entry

    def search(
        self,
        db: Session,
        *,
        admin_id: Optional[int] = None,
        action: Optional[str] = None,
        target_type: Optional[str] = None,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 50,
    ) -> Tuple[List[AuditLog], int]:
        stmt = select(AuditLog)
        if admin_id is not None:
            stmt = stmt.where(AuditLog.admin_id == admin_id)
        if action:
            stmt = stmt.where(func.lower(AuditLog.action).contains(action.lower()))
        if target_type:
            stmt = stmt.where(AuditLog.target_type == target_type)
        if date_from is not None:
            stmt = stmt.where(AuditLog.timestamp >= date_from)
        if date_to is not None:
            stmt = stmt.where(AuditLog.timestamp <= date_to)
        stmt = stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def count_by(self, db: Session, column, *, since: datetime) -> Dict[str, int]:
        stmt = (
            select(column, func.count(AuditLog.id))
            .where(AuditLog.timestamp >= since)
            .group_by(column)
        )
        return {str(key): count for key, count in db.execute(stmt).all()}


# Singleton instance
crud_audit_log = CRUDAuditLog(AuditLog)
