"""
Shared fixtures: an application backed by an in-memory SQLite database, with
the completion service and the S3 client replaced through
`app.dependency_overrides`.
"""

from uuid import UUID

import botocore.exceptions
import pytest
from fastapi.testclient import TestClient

from humanlenk.api.completion_service import CompletionResult
from humanlenk.api.dependencies import get_completion_service, get_storage_client
from humanlenk.database.config.config import Settings
from humanlenk.database.entities.enums import UserRole
from humanlenk.database.entities.user import User
from humanlenk.main import create_app


class FakeCompletionService:
    """Records every request and answers with `reply`, or fails with `failure`."""

    configured = True

    def __init__(self):
        self.reply = "Here is a concise summary."
        self.failure = None
        self.calls = []

    async def complete(self, messages):
        self.calls.append(messages)
        if self.failure:
            return CompletionResult(failure=self.failure)
        return CompletionResult(text=self.reply)


class FakeS3Client:
    """In-memory stand-in for the boto3 S3 client methods the API uses."""

    def __init__(self):
        self.objects = {}
        self.deleted = []
        self.fail = False

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        if self.fail:
            raise botocore.exceptions.EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")
        self.objects[key] = {"bucket": bucket, "body": fileobj.read(), "extra": ExtraArgs}

    def delete_object(self, Bucket, Key):
        self.deleted.append(Key)
        self.objects.pop(Key, None)

    def generate_presigned_url(self, operation, Params, ExpiresIn):
        return f"https://{Params['Bucket']}.s3.amazonaws.com/{Params['Key']}?X-Amz-Expires={ExpiresIn}&op={operation}"


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        SECRET_KEY="test-secret",
        ENVIRONMENT="test",
        DB_DRIVER_NAME="sqlite",
        DB_DATABASE_NAME=None,
        BCRYPT_ROUNDS=4,
        API_KEY=None,
        BUCKET_NAME="humanlenk-test",
        REGION="us-east-1",
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def completion():
    return FakeCompletionService()


@pytest.fixture
def storage():
    return FakeS3Client()


@pytest.fixture
def app(settings, completion, storage):
    app = create_app(settings)
    app.dependency_overrides[get_completion_service] = lambda: completion
    app.dependency_overrides[get_storage_client] = lambda: storage
    return app


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Factory registering an account; returns its user, token and auth headers."""
    def _register(email="alice@example.com", password="password123", name="Alice"):
        response = client.post("/api/auth/register", json={"email": email, "password": password, "name": name})
        assert response.status_code == 201, response.text
        data = response.json()["data"]
        return {
            "user": data["user"],
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
        }
    return _register


@pytest.fixture
def promote(app):
    def _promote(user_id):
        with app.state.session_factory() as session:
            user = session.get(User, UUID(user_id))
            user.role = UserRole.ADMIN.value
            session.commit()
    return _promote


@pytest.fixture
def admin(register, promote):
    account = register(email="admin@example.com", name="Admin")
    promote(account["user"]["id"])
    return account


@pytest.fixture
def count_rows(app):
    def _count(model):
        with app.state.session_factory() as session:
            return session.query(model).count()
    return _count


@pytest.fixture
def new_session(client):
    """Factory creating a chat session for the given auth headers."""
    def _new_session(headers, title=None):
        body = {"title": title} if title is not None else None
        response = client.post("/api/chat/sessions", json=body, headers=headers)
        assert response.status_code == 200, response.text
        return response.json()["data"]
    return _new_session


@pytest.fixture
def upload(client):
    """Factory uploading a small text file for the given auth headers."""
    def _upload(headers, name="notes.txt", content=b"meeting notes", content_type="text/plain"):
        return client.post("/api/files/upload", files={"file": (name, content, content_type)}, headers=headers)
    return _upload
