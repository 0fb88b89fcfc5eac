"""Pytest configuration and shared fixtures."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("COMPLETION_URL", "http://completion.test/v1/chat")
os.environ["COMPLETION_API_KEY"] = "test-completion-key"
os.environ["DB_DRIVER_NAME"] = "sqlite"
os.environ["DB_DATABASE_NAME"] = ":memory:"
os.environ["INIT_MODE"] = "none"

import json
import uuid

import bcrypt
import httpx
import pytest
from sqlalchemy import delete

from lexadvisor.api.aws_bucket_funcs.funcs import DocumentStorage
from lexadvisor.api.completion_client import CompletionClient
from lexadvisor.auth.session_store import SessionStore
from lexadvisor.crypt import encrypt_decrypt
from lexadvisor.database.config.connection_engine import connection_engine, metadata
from lexadvisor.database.core.funcs import register_user
from lexadvisor.database.entities import UserRole
from lexadvisor.database.helpers.transactionManagement import transactional

PASSWORD = "secret123"


def delta_frame(content: str) -> bytes:
    """One SSE line carrying a chat-completion delta."""
    return f"data: {json.dumps({'choices': [{'delta': {'content': content}}]}, ensure_ascii=False)}\n".encode("utf-8")


DONE = b"data: [DONE]\n"


@transactional
def set_roles(user_id: str, *roles: str, session=None) -> None:
    """Replace the role rows of a user, bypassing the row policies."""
    key = uuid.UUID(user_id)
    session.execute(delete(UserRole).where(UserRole.user_id == key))
    for role in roles:
        session.add(UserRole(user_id=key, role=role))


class FakeS3:
    """In-memory stand-in for the boto3 S3 client calls used by the app."""

    def __init__(self):
        self.objects = {}
        self.deleted = []

    def put_object(self, Bucket, Key, Body, **extra):
        self.objects[Key] = {"bucket": Bucket, "body": Body, **extra}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)
        self.deleted.append(Key)

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://s3.test/{Params['Bucket']}/{Params['Key']}?expires={ExpiresIn}"


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """Keep password hashing cheap in tests."""
    real_gensalt = bcrypt.gensalt
    monkeypatch.setattr(encrypt_decrypt.bcrypt, "gensalt", lambda: real_gensalt(rounds=4))


@pytest.fixture(autouse=True)
def database():
    """Fresh schema for every test."""
    metadata.create_all(connection_engine)
    yield
    metadata.drop_all(connection_engine)


@pytest.fixture
def make_user():
    """Register a user and give it ``role``; returns the user id."""

    def _make(email: str, role: str = "user", full_name: str | None = None) -> str:
        res = register_user(email=email, password=PASSWORD, full_name=full_name or email.split("@")[0])
        assert res["res"], res
        if role != "user":
            set_roles(res["user_id"], role)
        return res["user_id"]

    return _make


@pytest.fixture
def signed_in(make_user):
    """Create a user with ``role`` and return a signed-in `SessionStore`."""

    def _signed_in(role: str = "user", email: str | None = None) -> SessionStore:
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@lex.test"
        make_user(email, role)
        store = SessionStore()
        result = store.sign_in(email, PASSWORD)
        assert result.ok, result.error
        return store

    return _signed_in


@pytest.fixture
def completion_factory():
    """
    Build a `CompletionClient` whose endpoint answers with ``chunks``.

    Every request is appended to the returned ``requests`` list.
    """

    def _factory(chunks=(), status: int = 200, requests: list | None = None) -> CompletionClient:
        def handler(request: httpx.Request) -> httpx.Response:
            if requests is not None:
                requests.append(request)

            async def body():
                for chunk in chunks:
                    yield chunk

            return httpx.Response(status, content=body(), headers={"content-type": "text/event-stream"})

        return CompletionClient(
            url="http://completion.test/v1/chat",
            api_key="test-completion-key",
            timeout=5.0,
            max_deferrals=2,
            transport=httpx.MockTransport(handler),
        )

    return _factory


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def storage(fake_s3) -> DocumentStorage:
    return DocumentStorage(s3_client=fake_s3)
