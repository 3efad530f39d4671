from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Database
    DATABASE_URL: str

    # API
    API_TITLE: str = "SocialNet API"
    API_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Security
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 30

    # Media store (Cloudinary)
    CLOUDINARY_CLOUD_NAME: Optional[str] = None
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_API_SECRET: Optional[str] = None
    CLOUDINARY_FOLDER: str = "reseau-social"
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024

    # Push notifications (Firebase)
    FIREBASE_ENABLED: bool = False
    FIREBASE_CREDENTIALS_PATH: str = "firebase-credentials.json"
    FIREBASE_PROJECT_ID: Optional[str] = None

    # Content rules
    STORY_TTL_HOURS: int = 24
    FEED_DEFAULT_LIMIT: int = 20
    COMMENT_DELETE_POLICY: str = "orphan"
    NOTIFICATION_RETENTION_DAYS: int = 30

    class Config:
        env_file = ".env"
        case_sensitive = True

# Create settings instance
settings = Settings()
