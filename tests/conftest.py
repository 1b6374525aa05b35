import os
import tempfile

# Settings are read at import time, so the environment has to be in place
# before anything from spendwise is imported.
_TEST_DIR = tempfile.mkdtemp(prefix="spendwise-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DIR}/test.db"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["S3_BUCKET_NAME"] = ""
os.environ["UPLOAD_DIR"] = os.path.join(_TEST_DIR, "uploads")

from typing import Dict

import httpx
import pytest

from spendwise.main import app
from spendwise.api.deps import get_storage
from spendwise.core.database import AsyncSessionLocal, Base, engine
from spendwise.core.exceptions import StorageError
from spendwise.core.storage import ReceiptStorage

PASSWORD = "Sup3rSecret"


class InMemoryStorage(ReceiptStorage):
    """Blob store kept in a dict; ``fail_uploads`` and ``fail_deletes`` simulate outages."""

    def __init__(self):
        self.blobs: Dict[str, bytes] = {}
        self.fail_uploads = False
        self.fail_deletes = False

    async def upload(self, content: bytes, key: str, content_type: str) -> str:
        if self.fail_uploads:
            raise StorageError(f"disk full writing /srv/blobs/{key}")
        self.blobs[key] = content
        return f"memory://{key}"

    async def delete(self, key: str) -> None:
        if self.fail_deletes:
            raise StorageError("blob store unavailable")
        self.blobs.pop(key, None)


@pytest.fixture(autouse=True)
async def database():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled connections belong to this test's event loop
    await engine.dispose()


@pytest.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


@pytest.fixture
def storage():
    fake = InMemoryStorage()
    app.dependency_overrides[get_storage] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_storage, None)


@pytest.fixture
async def client(storage):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def signup_and_login(client: httpx.AsyncClient, email: str, name: str = "Test User") -> Dict[str, str]:
    response = await client.post(
        "/api/v1/auth/signup",
        json={"email": email, "password": PASSWORD, "name": name},
    )
    assert response.status_code == 201, response.text
    response = await client.post(
        "/api/v1/auth/jwt/login",
        data={"username": email, "password": PASSWORD},
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


async def first_category_id(client: httpx.AsyncClient, headers: Dict[str, str], name: str = None) -> str:
    response = await client.get("/api/v1/categories", headers=headers)
    assert response.status_code == 200
    categories = response.json()
    if name is not None:
        categories = [c for c in categories if c["name"] == name]
    return categories[0]["id"]


@pytest.fixture
async def auth_headers(client):
    return await signup_and_login(client, "alice@spendwise.io", "Alice")


@pytest.fixture
async def other_headers(client):
    return await signup_and_login(client, "bob@spendwise.io", "Bob")
