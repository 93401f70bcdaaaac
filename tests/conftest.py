"""
Shared pytest fixtures — in‑memory SQLite, an in-memory object store and a
FastAPI TestClient with authentication stubbed out.
"""
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

import docstore.models  # noqa: F401  — register models
from docstore.config import ClaimSettings, SecuritySettings, Settings, UploadSettings
from docstore.database import Base, create_session_factory
from docstore.errors import InfraError, NotFoundError
from docstore.filestore import FileItem, FileStore, object_key
from docstore.main import create_app
from docstore.pipeline import Stores
from docstore.repositories import (
    DocumentRepository,
    SenderRepository,
    TagRepository,
    UploadRepository,
)
from docstore.security import User, current_user

JWT_SECRET = "test-secret"
JWT_ISSUER = "login.test"
CLAIM = ClaimSettings(name="docstore", url="http://localhost:3000", roles=["User"])

# StaticPool ensures all connections share the same in-memory database
_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


class MemoryFileStore(FileStore):
    """Object store double keeping payloads in a dict; ``fail_on`` makes an operation raise."""

    def __init__(self):
        self.objects: Dict[str, FileItem] = {}
        self.fail_on = set()

    def save(self, item: FileItem) -> None:
        if "save" in self.fail_on:
            raise InfraError("object store unavailable")
        self.objects[item.key] = item

    def get(self, path: str) -> FileItem:
        if "get" in self.fail_on:
            raise InfraError("object store unavailable")
        try:
            return self.objects[object_key(path)]
        except KeyError:
            raise NotFoundError(f"file not found '{path}'")

    def delete(self, path: str) -> None:
        if "delete" in self.fail_on:
            raise InfraError("object store unavailable")
        if object_key(path) not in self.objects:
            raise NotFoundError(f"file not found '{path}'")
        del self.objects[object_key(path)]


@pytest.fixture(autouse=True)
def _reset_tables():
    Base.metadata.create_all(bind=_ENGINE)
    yield
    Base.metadata.drop_all(bind=_ENGINE)


@pytest.fixture()
def session_factory():
    return create_session_factory(_ENGINE)


@pytest.fixture()
def filestore():
    return MemoryFileStore()


@pytest.fixture()
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture()
def settings(upload_dir):
    return Settings(
        security=SecuritySettings(
            jwt_issuer=JWT_ISSUER,
            jwt_secret=JWT_SECRET,
            login_redirect="http://localhost:3000/login",
            claim=CLAIM,
            cache_duration="1m",
        ),
        upload=UploadSettings(
            allowed_file_types=["pdf", "png"],
            max_upload_size=1024,
            upload_path=str(upload_dir),
        ),
    )


@pytest.fixture()
def stores(session_factory, filestore, settings):
    return Stores(
        session_factory=session_factory,
        documents=DocumentRepository(session_factory),
        tags=TagRepository(session_factory),
        senders=SenderRepository(session_factory),
        uploads=UploadRepository(session_factory),
        filestore=filestore,
        upload=settings.upload,
    )


@pytest.fixture()
def app(settings, filestore):
    return create_app(settings, engine=_ENGINE, filestore=filestore, configure_logging=False)


@pytest.fixture()
def client(app):
    app.dependency_overrides[current_user] = lambda: User(
        username="tester", user_id="1", display_name="Test User", email="tester@example.com", roles=["User"]
    )
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def anon_client(app):
    """Client going through the real JWT authentication."""
    with TestClient(app) as c:
        yield c


def make_token(
    claims=None,
    secret: str = JWT_SECRET,
    issuer: str = JWT_ISSUER,
    expires: Optional[datetime] = None,
    **extra,
) -> str:
    if claims is None:
        claims = [f"{CLAIM.name}|{CLAIM.url}|User"]
    payload = {
        "iss": issuer,
        "sub": "tester",
        "exp": expires or datetime.now(timezone.utc) + timedelta(hours=1),
        "claims": claims,
        **extra,
    }
    return jwt.encode(payload, secret, algorithm="HS256")
