from datetime import datetime, timedelta, timezone

import jwt
import pytest

from sharebox.core.errors import AuthError, Conflict, InvalidOperation
from sharebox.core.security import create_access_token, decode_access_token
from sharebox.main import create_app
from sharebox.models import Base, User
from sharebox.models.database import make_engine, make_session_factory
from sharebox.services import auth as auth_service


def test_register_and_authenticate(db):
    identity = auth_service.register(db, "dave", "dave@example.com", "s3cret!")

    assert identity.is_admin is False
    stored = db.get(User, identity.id)
    assert stored.password != "s3cret!"

    assert auth_service.authenticate(db, "dave@example.com", "s3cret!") == identity


def test_register_requires_all_fields(db):
    with pytest.raises(InvalidOperation):
        auth_service.register(db, "dave", "", "pw")


@pytest.mark.parametrize(
    "username,email",
    [("alice", "other@example.com"), ("other", "alice@example.com")],
)
def test_register_duplicate(db, alice, username, email):
    with pytest.raises(Conflict):
        auth_service.register(db, username, email, "pw")


def test_bad_credentials(db, alice):
    with pytest.raises(AuthError):
        auth_service.authenticate(db, "alice@example.com", "wrong")
    with pytest.raises(AuthError):
        auth_service.authenticate(db, "ghost@example.com", "password123")


def test_token_round_trip(db, settings, alice):
    token = create_access_token(alice.id, alice.is_admin, settings)

    assert decode_access_token(token, settings) == alice.id
    assert auth_service.verify_token(db, token, settings) == alice


def test_verify_token_rereads_admin_flag(db, settings, alice):
    token = create_access_token(alice.id, False, settings)
    db.get(User, alice.id).is_admin = True
    db.commit()

    assert auth_service.verify_token(db, token, settings).is_admin is True


def test_expired_and_forged_tokens(settings):
    expired = jwt.encode(
        {"sub": "1", "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )
    forged = jwt.encode({"sub": "1"}, "not-the-secret", algorithm="HS256")

    with pytest.raises(AuthError):
        decode_access_token(expired, settings)
    with pytest.raises(AuthError):
        decode_access_token(forged, settings)
    with pytest.raises(AuthError):
        decode_access_token("garbage", settings)


def test_token_for_deleted_user(db, settings):
    with pytest.raises(AuthError):
        auth_service.verify_token(db, create_access_token(404, False, settings), settings)


def test_seed_admin_runs_once(db, settings):
    admin = auth_service.seed_admin(db, settings)
    assert admin.is_admin is True
    assert admin.email == "admin@example.com"

    assert auth_service.seed_admin(db, settings) is None
    assert db.query(User).filter(User.is_admin.is_(True)).count() == 1


def test_seed_admin_skips_taken_username(db, settings):
    auth_service.register(db, "admin", "someone@example.com", "pw")

    assert auth_service.seed_admin(db, settings) is None
    assert db.query(User).filter(User.is_admin.is_(True)).count() == 0


def test_create_app_survives_taken_admin_username(tmp_path, settings, storage):
    url = f"sqlite:///{tmp_path / 'boot.db'}"
    engine = make_engine(url)
    Base.metadata.create_all(bind=engine)
    with make_session_factory(engine)() as session:
        auth_service.register(session, "admin", "someone@example.com", "pw")
    engine.dispose()

    app = create_app(settings.model_copy(update={"database_url": url}), storage=storage)

    assert app.state.settings.database_url == url
