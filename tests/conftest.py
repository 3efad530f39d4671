import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("FIREBASE_ENABLED", "false")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import socialnet.models  # noqa: F401
from socialnet.core.exceptions import UpstreamError
from socialnet.core.security import TOKEN_TYPE_ADMIN, TOKEN_TYPE_USER, create_access_token
from socialnet.crud import crud_admin, crud_post, crud_user
from socialnet.database import Base, get_db
from socialnet.main import app
from socialnet.schemas.admin import AdminCreate
from socialnet.schemas.user import UserCreate
from socialnet.services.deletion_service import deletion_service
from socialnet.services.media_service import MediaService
from socialnet.services.notification_service import notification_service
from socialnet.services.story_service import story_service


class FakeMediaStore:
    """In-memory stand-in for the Cloudinary adapter."""

    extract_public_id = staticmethod(MediaService.extract_public_id)

    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.failing_ids = set()

    def upload(self, data, owner_id, kind="publication"):
        public_id = f"reseau-social/{uuid.uuid4().hex}"
        self.uploads.append((public_id, owner_id, kind))
        return {"url": f"https://res.cloudinary.com/demo/image/upload/v1/{public_id}.jpg", "type": "image"}

    def delete(self, public_id, kind="image"):
        if public_id in self.failing_ids:
            raise UpstreamError(f"Media delete failed for {public_id}")
        self.deleted.append((public_id, kind))
        return True


class FakePushSink:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    def send(self, token, title, body, data=None, db=None, user_id=None):
        if self.fail:
            raise RuntimeError("FCM unavailable")
        self.sent.append({"token": token, "title": title, "body": body, "data": data})
        return "message-id"


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def media_store(monkeypatch):
    store = FakeMediaStore()
    monkeypatch.setattr(deletion_service, "media_store", store)
    monkeypatch.setattr(story_service, "media_store", store)
    monkeypatch.setattr("socialnet.api.v1.endpoints.media.media_service", store)
    return store


@pytest.fixture
def push_sink(monkeypatch):
    sink = FakePushSink()
    monkeypatch.setattr(notification_service, "push_sink", sink)
    return sink


@pytest.fixture
def client(session_factory, media_store, push_sink):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    def _make_user(username, password="secret123", **extra):
        user_in = UserCreate(
            username=username,
            email=f"{username}@example.com",
            password=password,
            **extra,
        )
        return crud_user.create_user(db, user_in=user_in)
    return _make_user


@pytest.fixture
def make_post(db):
    def _make_post(author, text="hello", images=None, videos=None, mentions=None):
        return crud_post.create_post(
            db,
            author_user_id=author.id,
            text=text,
            images=images or [],
            videos=videos or [],
            mentions=mentions,
        )
    return _make_post


@pytest.fixture
def make_admin(db):
    def _make_admin(username="moderator", role="admin", **flags):
        admin_in = AdminCreate(
            username=username,
            email=f"{username}@admin.example.com",
            password="adminpass123",
            role=role,
            **flags,
        )
        return crud_admin.create_admin(db, admin_in=admin_in)
    return _make_admin


def user_headers(user):
    token = create_access_token({"sub": str(user.id), "type": TOKEN_TYPE_USER})
    return {"Authorization": f"Bearer {token}"}


def admin_headers(admin):
    token = create_access_token({"sub": str(admin.id), "type": TOKEN_TYPE_ADMIN})
    return {"Authorization": f"Bearer {token}"}
