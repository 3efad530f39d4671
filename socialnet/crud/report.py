"""CRUD operations for content reports."""

from typing import Dict, List, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from socialnet.crud.base import CRUDBase
from socialnet.models.report import Report, ReportStatus


class CRUDReport(CRUDBase[Report, dict, dict]):

    def get_pending(self, db: Session, *, skip: int = 0, limit: int = 20) -> Tuple[List[Report], int]:
        stmt = (
            select(Report)
            .where(Report.status == ReportStatus.PENDING.value)
            .order_by(Report.created_at.desc(), Report.id.desc())
        )
        return self.paginate(db, stmt, skip=skip, limit=limit)

    def count_by(self, db: Session, column) -> Dict[str, int]:
        stmt = select(column, func.count(Report.id)).group_by(column)
        return {key: count for key, count in db.execute(stmt).all()}


# Singleton instance
crud_report = CRUDReport(Report)
