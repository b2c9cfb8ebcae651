import pytest
from httpx import AsyncClient, ASGITransport
import os
from datetime import timedelta

# Set up test environment variables before anything else
os.environ["ENV"] = "testing"
os.environ["DB_NAME"] = "taskhub_test"
os.environ["SECRET_KEY"] = "test_secret_key_12345"

from config import config
config.ENV = "testing"
config.DB_NAME = "taskhub_test"

from mongomock_motor import AsyncMongoMockClient

from main import app
from models.task import TaskModel
from models.user import UserModel
from routes.deps import create_access_token


@pytest.fixture(scope="function")
async def db():
    """Fresh in-memory database per test, injected the same way main.lifespan does."""
    client = AsyncMongoMockClient()
    database = client[config.DB_NAME]
    app.state.db = database
    yield database
    app.state.db = None


@pytest.fixture(scope="function")
async def async_client(db):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client


async def _insert_user(db, **fields) -> UserModel:
    user = UserModel(**fields)
    await db.users.insert_one(user.model_dump())
    return user


@pytest.fixture(scope="function")
async def admin_user(db):
    return await _insert_user(db, id="admin_id", email="admin@test.com", name="Ada Admin", role="admin")


@pytest.fixture(scope="function")
async def manager_user(db):
    return await _insert_user(db, id="manager_id", email="manager@test.com", name="Max Manager", role="manager")


@pytest.fixture(scope="function")
async def test_user(db):
    return await _insert_user(db, id="user_id", email="user@test.com", name="Uma User", role="user")


@pytest.fixture(scope="function")
async def other_user(db):
    return await _insert_user(db, id="other_id", email="other@test.com", name="Otto Other", role="user")


def headers_for(user: UserModel) -> dict:
    token = create_access_token(
        data={"sub": user.id, "role": user.role},
        expires_delta=timedelta(minutes=60)
    )
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture(scope="function")
def manager_headers(manager_user):
    return headers_for(manager_user)


@pytest.fixture(scope="function")
def auth_headers(test_user):
    return headers_for(test_user)


@pytest.fixture(scope="function")
def other_headers(other_user):
    return headers_for(other_user)


@pytest.fixture(scope="function")
def insert_task(db):
    """Insert a task document directly, bypassing the coordinator."""
    async def _insert(**fields) -> dict:
        doc = TaskModel(**fields).model_dump()
        await db.tasks.insert_one(doc)
        return doc
    return _insert
