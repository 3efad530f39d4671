"""Accounts, profiles and the follow/block graph."""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from socialnet.core.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from socialnet.core.security import TOKEN_TYPE_USER, create_access_token
from socialnet.crud import crud_user
from socialnet.models.notification import NotificationType
from socialnet.models.user import User
from socialnet.schemas.user import PrivacySettingsUpdate, UserCreate, UserUpdate
from socialnet.services.notification_service import notification_service

logger = logging.getLogger(__name__)


class UserService:
    """Business rules around users and their relations."""

    # Privacy setting name -> User column
    PRIVACY_FIELDS = {
        "profile": "privacy_profile",
        "posts": "privacy_posts",
        "friends_list": "privacy_friends_list",
    }

    def __init__(self, notifier=None):
        self.notifier = notifier or notification_service

    def get_user(self, db: Session, user_id: int) -> User:
        user = crud_user.get(db, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def get_profile(self, db: Session, user_id: int, viewer_id: Optional[int] = None) -> Dict:
        """User columns plus follower/following/post counts."""
        user = self.get_user(db, user_id)
        self.ensure_visible(db, user, viewer_id, "profile")
        return {
            **{column.name: getattr(user, column.name) for column in User.__table__.columns},
            "follower_count": crud_user.count_followers(db, user_id),
            "following_count": crud_user.count_following(db, user_id),
            "post_count": crud_user.count_posts(db, user_id),
        }

    # ----- Privacy -----
    def ensure_visible(self, db: Session, owner: User, viewer_id: Optional[int], setting: str) -> None:
        """
        Raise ``ForbiddenError`` unless ``viewer_id`` may see ``owner``'s ``setting``.

        "friends" means a mutual follow. The owner and internal callers
        (``viewer_id=None``) always pass.
        """
        level = getattr(owner, self.PRIVACY_FIELDS[setting]) or "public"
        if viewer_id is None or viewer_id == owner.id or level == "public":
            return
        if level == "friends" and crud_user.is_following(
            db, follower_id=owner.id, followed_id=viewer_id
        ) and crud_user.is_following(db, follower_id=viewer_id, followed_id=owner.id):
            return
        raise ForbiddenError(f"This user's {setting.replace('_', ' ')} is not visible to you")

    def get_privacy_settings(self, user: User) -> Dict[str, str]:
        return {name: getattr(user, column) for name, column in self.PRIVACY_FIELDS.items()}

    def update_privacy_settings(self, db: Session, user: User, settings_in: PrivacySettingsUpdate) -> Dict[str, str]:
        changes = {
            self.PRIVACY_FIELDS[name]: level
            for name, level in settings_in.model_dump(exclude_none=True).items()
        }
        if not changes:
            raise ValidationError("No privacy setting to update")
        user = crud_user.update(db, db_obj=user, obj_in=changes)
        logger.info(f"User {user.id} updated privacy settings: {sorted(changes)}")
        return self.get_privacy_settings(user)

    # ----- Accounts -----
    def register(self, db: Session, user_in: UserCreate) -> User:
        if crud_user.get_by_username(db, user_in.username):
            raise ConflictError("Username already taken")
        if crud_user.get_by_email(db, user_in.email):
            raise ConflictError("Email already registered")
        if crud_user.get_by_phone(db, user_in.phone_number):
            raise ConflictError("Phone number already registered")

        try:
            user = crud_user.create_user(db, user_in=user_in)
        except IntegrityError as e:
            # Lost a race against a concurrent registration
            raise ConflictError("User already exists") from e

        logger.info(f"User registered: id={user.id}, username={user.username}")
        return user

    def login(self, db: Session, *, identifier: str, password: str) -> Tuple[User, str]:
        """Return the user and a bearer token. Suspended users may not log in."""
        user = crud_user.authenticate(db, identifier=identifier, password=password)
        if not user:
            raise UnauthorizedError("Incorrect username/email or password")
        if not user.is_active:
            raise ForbiddenError("Account is deactivated")
        if user.is_suspended:
            raise ForbiddenError(f"Account suspended until {user.suspended_until.isoformat()}")

        user = crud_user.update(db, db_obj=user, obj_in={"last_login_at": datetime.utcnow()})
        token = create_access_token({"sub": str(user.id), "type": TOKEN_TYPE_USER})
        logger.info(f"User logged in: id={user.id}")
        return user, token

    def update_profile(self, db: Session, user: User, user_in: UserUpdate) -> User:
        if user_in.phone_number:
            owner = crud_user.get_by_phone(db, user_in.phone_number)
            if owner and owner.id != user.id:
                raise ConflictError("Phone number already registered")
        return crud_user.update(db, db_obj=user, obj_in=user_in)

    def deactivate(self, db: Session, user: User, reason: Optional[str] = None) -> User:
        user = crud_user.update(db, db_obj=user, obj_in={
            "is_active": False,
            "deactivation_reason": reason or "Deactivated by user",
        })
        logger.info(f"User {user.id} deactivated their account")
        return user

    def register_device_token(self, db: Session, user: User, token: str) -> User:
        return crud_user.update(db, db_obj=user, obj_in={
            "fcm_token": token,
            "fcm_token_updated_at": datetime.utcnow(),
        })

    def search(self, db: Session, *, query: str, requester_id: int,
               skip: int = 0, limit: int = 25) -> Tuple[List[User], int]:
        if not query.strip():
            raise ValidationError("Search query must not be empty")
        return crud_user.search(db, query=query.strip(), exclude_id=requester_id, skip=skip, limit=limit)

    # ----- Graph -----
    def toggle_follow(self, db: Session, *, follower_id: int, target_id: int) -> Tuple[str, int]:
        """
        Follow ``target_id``, or unfollow if already following.

        Returns:
            ("followed" | "unfollowed", target's follower count)

        Raises:
            ValidationError: Following yourself.
            NotFoundError: Unknown target.
            ForbiddenError: Either user has blocked the other.
        """
        if follower_id == target_id:
            raise ValidationError("You cannot follow yourself")
        self.get_user(db, target_id)
        if target_id in crud_user.get_blocked_ids(db, follower_id):
            raise ForbiddenError("Follow not allowed between blocked users")

        try:
            if crud_user.is_following(db, follower_id=follower_id, followed_id=target_id):
                crud_user.remove_follow(db, follower_id=follower_id, followed_id=target_id)
                action = "unfollowed"
            else:
                crud_user.add_follow(db, follower_id=follower_id, followed_id=target_id)
                action = "followed"
            db.commit()
        except IntegrityError as e:
            db.rollback()
            raise ConflictError("Follow state changed concurrently") from e
        except Exception:
            db.rollback()
            raise

        if action == "followed":
            self.notifier.notify(
                db,
                sender_id=follower_id,
                recipient_id=target_id,
                notification_type=NotificationType.FOLLOW.value,
            )
        logger.info(f"User {follower_id} {action} user {target_id}")
        return action, crud_user.count_followers(db, target_id)

    def get_followers(self, db: Session, user_id: int, viewer_id: Optional[int] = None) -> List[User]:
        self.ensure_visible(db, self.get_user(db, user_id), viewer_id, "friends_list")
        return [crud_user.get(db, uid) for uid in sorted(crud_user.get_follower_ids(db, user_id))]

    def get_following(self, db: Session, user_id: int, viewer_id: Optional[int] = None) -> List[User]:
        self.ensure_visible(db, self.get_user(db, user_id), viewer_id, "friends_list")
        return [crud_user.get(db, uid) for uid in sorted(crud_user.get_following_ids(db, user_id))]

    def block(self, db: Session, *, blocker_id: int, target_id: int) -> None:
        """Block a user. Follow edges in both directions are dropped."""
        if blocker_id == target_id:
            raise ValidationError("You cannot block yourself")
        self.get_user(db, target_id)
        if crud_user.has_blocked(db, blocker_id=blocker_id, blocked_id=target_id):
            return

        try:
            crud_user.add_block(db, blocker_id=blocker_id, blocked_id=target_id)
            crud_user.remove_follow(db, follower_id=blocker_id, followed_id=target_id)
            crud_user.remove_follow(db, follower_id=target_id, followed_id=blocker_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(f"User {blocker_id} blocked user {target_id}")

    def unblock(self, db: Session, *, blocker_id: int, target_id: int) -> None:
        try:
            removed = crud_user.remove_block(db, blocker_id=blocker_id, blocked_id=target_id)
            db.commit()
        except Exception:
            db.rollback()
            raise
        if not removed:
            raise NotFoundError("User is not blocked")
        logger.info(f"User {blocker_id} unblocked user {target_id}")

    def get_suggested(self, db: Session, *, user_id: int, limit: int = 10) -> List[User]:
        return crud_user.get_suggested(db, user_id=user_id, limit=limit)


# Singleton instance
user_service = UserService()
