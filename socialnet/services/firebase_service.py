"""Firebase Cloud Messaging service for SocialNet push notifications."""

import logging
from typing import Dict, Optional

import firebase_admin
from firebase_admin import credentials, exceptions, messaging
from sqlalchemy import select
from sqlalchemy.orm import Session

from socialnet.config import settings
from socialnet.models.user import User

logger = logging.getLogger(__name__)


class FirebaseService:
    """
    Push sink backed by Firebase Cloud Messaging.

    Sending never raises: delivery failures are logged and reported as a
    ``None`` message id, so notification writes never depend on FCM.
    """

    def __init__(self):
        self._app: Optional[firebase_admin.App] = None
        self._initialized: bool = False

    def initialize(self) -> bool:
        """
        Initialize Firebase Admin SDK with credentials from config.

        Returns:
            bool: True if initialization succeeded, False otherwise.
        """
        if self._initialized:
            logger.debug("Firebase already initialized, skipping.")
            return True

        if not settings.FIREBASE_ENABLED:
            logger.info("Firebase is disabled via FIREBASE_ENABLED=false.")
            return False

        try:
            cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
            self._app = firebase_admin.initialize_app(cred, {
                "projectId": settings.FIREBASE_PROJECT_ID,
            })
            self._initialized = True
            logger.info(
                f"Firebase initialized successfully for project: {settings.FIREBASE_PROJECT_ID}"
            )
            return True
        except FileNotFoundError:
            logger.error(
                f"Firebase credentials file not found: {settings.FIREBASE_CREDENTIALS_PATH}"
            )
            return False
        except (ValueError, exceptions.FirebaseError) as e:
            logger.error(f"Failed to initialize Firebase: {e}")
            return False

    def is_initialized(self) -> bool:
        """Check whether Firebase Admin SDK is ready."""
        return self._initialized

    def _build_message(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
    ) -> messaging.Message:
        """Build an FCM Message with Android and APNS (iOS) config."""
        android_config = messaging.AndroidConfig(
            priority="high",
            notification=messaging.AndroidNotification(
                title=title,
                body=body,
                icon="ic_notification",
                sound="default",
                channel_id="socialnet_notifications",
            ),
        )

        apns_config = messaging.APNSConfig(
            payload=messaging.APNSPayload(
                aps=messaging.Aps(
                    alert=messaging.ApsAlert(title=title, body=body),
                    sound="default",
                    badge=1,
                ),
            ),
        )

        return messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            android=android_config,
            apns=apns_config,
            data=data,
            token=token,
        )

    def send(
        self,
        token: str,
        title: str,
        body: str,
        data: Optional[Dict[str, str]] = None,
        db: Optional[Session] = None,
        user_id: Optional[int] = None,
    ) -> Optional[str]:
        """
        Send a push notification to a single device.

        Args:
            token: FCM device registration token.
            title: Notification title.
            body: Notification body text.
            data: String-valued payload for deep linking.
            db: Optional database session for token cleanup on error.
            user_id: Optional user ID for token cleanup on error.

        Returns:
            Message ID string on success, None on failure.
        """
        if not self._initialized:
            logger.debug("Firebase not initialized, skipping push.")
            return None

        try:
            message_id = messaging.send(self._build_message(token, title, body, data))
            logger.info(f"FCM sent to token={token[:20]}...: message_id={message_id}")
            return message_id

        except (messaging.UnregisteredError, messaging.InvalidArgumentError) as e:
            logger.warning(f"FCM token rejected ({type(e).__name__}): {token[:20]}...")
            if db is not None and user_id:
                self._remove_invalid_token(db, user_id, token)
            return None
        except ValueError as e:
            logger.error(f"FCM invalid argument: {e}")
            return None
        except exceptions.FirebaseError as e:
            logger.error(f"FCM send failed: {e}")
            return None

    def _remove_invalid_token(self, db: Session, user_id: int, token: str) -> None:
        """Clear a device token FCM no longer accepts."""
        user = db.scalars(select(User).where(User.id == user_id)).first()
        if user and user.fcm_token == token:
            user.fcm_token = None
            user.fcm_token_updated_at = None
            try:
                db.add(user)
                db.commit()
            except Exception:
                db.rollback()
                raise
            logger.info(f"Removed invalid FCM token for user_id={user_id}")


# Singleton instance
firebase_service = FirebaseService()
