from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, Integer, String, TIMESTAMP

from ..database import Base


ADMIN_PERMISSIONS = (
    "can_manage_users",
    "can_manage_content",
    "can_view_analytics",
    "can_manage_system",
)


class Admin(Base):
    __tablename__ = "admins"

    id = Column(Integer, primary_key=True, index=True)

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    profile_picture_url = Column(String(500))

    role = Column(String(20), nullable=False, default="admin")

    # Permission flags
    can_manage_users = Column(Boolean, default=True)
    can_manage_content = Column(Boolean, default=True)
    can_view_analytics = Column(Boolean, default=True)
    can_manage_system = Column(Boolean, default=False)

    is_active = Column(Boolean, default=True)
    last_login_at = Column(TIMESTAMP)

    created_at = Column(TIMESTAMP, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'super_admin')", name="check_admin_role"),
    )

    def has_permission(self, permission: str) -> bool:
        """Super admins hold every permission."""
        if self.role == "super_admin":
            return True
        return bool(getattr(self, permission, False))

    @property
    def permissions(self) -> dict:
        return {name: self.has_permission(name) for name in ADMIN_PERMISSIONS}
