import pytest
from fastapi.testclient import TestClient

from sharebox.core.config import Settings
from sharebox.core.security import UserIdentity, hash_password
from sharebox.core.storage import LocalStorage
from sharebox.main import create_app
from sharebox.models import Base, User
from sharebox.models.database import make_engine, make_session_factory


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        storage_backend="local",
        storage_dir=str(tmp_path / "storage"),
        admin_password="adminpassword",
        log_level="WARNING",
    )


@pytest.fixture
def storage(tmp_path):
    return LocalStorage(tmp_path / "storage")


@pytest.fixture
def engine():
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = make_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def make_user(db):
    def _make_user(username, is_admin=False, password="password123"):
        user = User(
            username=username,
            email=f"{username}@example.com",
            password=hash_password(password),
            is_admin=is_admin,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return UserIdentity.from_user(user)

    return _make_user


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def admin(make_user):
    return make_user("root", is_admin=True)


@pytest.fixture
def app(settings, storage):
    return create_app(settings, storage=storage)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def register(client):
    """Register a user through the API and return (user json, auth headers)."""

    def _register(username, password="password123"):
        res = client.post(
            "/api/auth/register",
            json={"username": username, "email": f"{username}@example.com", "password": password},
        )
        assert res.status_code == 201, res.text
        body = res.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def admin_headers(client):
    res = client.post(
        "/api/auth/login", json={"email": "admin@example.com", "password": "adminpassword"}
    )
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}
