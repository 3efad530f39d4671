"""Create tables and optionally bootstrap the first super admin.

    python -m socialnet.init_db
    python -m socialnet.init_db --admin-username root --admin-email root@example.com --admin-password secret123
"""

import argparse

from socialnet.database import Base, SessionLocal, engine
import socialnet.models  # registers every model on Base.metadata
from socialnet.core.exceptions import ConflictError
from socialnet.schemas.admin import AdminCreate
from socialnet.services.admin_service import admin_service


def create_super_admin(username: str, email: str, password: str) -> None:
    db = SessionLocal()
    try:
        admin = admin_service.create_admin(db, AdminCreate(
            username=username,
            email=email,
            password=password,
            role="super_admin",
            can_manage_system=True,
        ))
        print(f"Super admin created: id={admin.id}")
    except ConflictError as e:
        print(f"Skipped super admin: {e.detail}")
    finally:
        db.close()


def main():
    parser = argparse.ArgumentParser(description="Initialize the SocialNet database")
    parser.add_argument("--admin-username")
    parser.add_argument("--admin-email")
    parser.add_argument("--admin-password")
    args = parser.parse_args()

    print("Creating database tables...")
    Base.metadata.create_all(bind=engine)
    print("Tables created successfully")

    if args.admin_username and args.admin_email and args.admin_password:
        create_super_admin(args.admin_username, args.admin_email, args.admin_password)


if __name__ == "__main__":
    main()
