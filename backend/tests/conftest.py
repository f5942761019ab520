from pathlib import Path
import os
import tempfile
import pytest

# Point the app at a throwaway database before anything imports `eduverse`.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="eduverse-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR / 'test.db'}"
os.environ["ENV"] = "dev"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["PAGE_DEFAULT_LIMIT"] = "10"
os.environ["PAGE_MAX_LIMIT"] = "50"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session  # noqa: E402

from eduverse import services  # noqa: E402
from eduverse.database import create_db_and_tables, drop_db_and_tables, engine  # noqa: E402
from eduverse.main import app  # noqa: E402
from eduverse.schemas import AdminIn  # noqa: E402

ROOT_PASSWORD = "rootpass123"


@pytest.fixture(autouse=True)
def reset_db():
    """Give every test empty tables."""
    drop_db_and_tables()
    create_db_and_tables()
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin(session):
    result = services.AdminService(session).create(
        AdminIn(username="root", email="root@example.com", password=ROOT_PASSWORD)
    )
    assert result.ok
    return result.value


@pytest.fixture
def auth_headers(client, admin):
    r = client.post('/api/auth/login', json={'username': 'root', 'password': ROOT_PASSWORD})
    assert r.status_code == 200
    token = r.json()['data']['access_token']
    return {'Authorization': f'Bearer {token}'}
