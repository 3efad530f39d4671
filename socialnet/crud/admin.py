"""CRUD operations for admin accounts."""

from typing import Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from socialnet.core.security import get_password_hash, verify_password
from socialnet.crud.base import CRUDBase
from socialnet.models.admin import Admin
from socialnet.schemas.admin import AdminCreate


class CRUDAdmin(CRUDBase[Admin, AdminCreate, dict]):

    def get_by_username_or_email(self, db: Session, *, username: str, email: str) -> Optional[Admin]:
        stmt = select(Admin).where(
            or_(func.lower(Admin.username) == username.lower(), func.lower(Admin.email) == email.lower())
        ).limit(1)
        return db.scalars(stmt).first()

    def create_admin(self, db: Session, *, admin_in: AdminCreate) -> Admin:
        data = admin_in.model_dump()
        data["password_hash"] = get_password_hash(data.pop("password"))
        data["email"] = data["email"].lower()
        return self.create(db, obj_in=data)

    def authenticate(self, db: Session, *, identifier: str, password: str) -> Optional[Admin]:
        admin = self.get_by_username_or_email(db, username=identifier, email=identifier)
        if not admin or not verify_password(password, admin.password_hash):
            return None
        return admin


# Singleton instance
crud_admin = CRUDAdmin(Admin)
