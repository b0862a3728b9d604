# sharebox/services/auth.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sharebox.core.config import Settings
from sharebox.core.errors import AuthError, Conflict, InvalidOperation
from sharebox.core.security import UserIdentity, decode_access_token, hash_password, verify_password
from sharebox.models import User

logger = logging.getLogger(__name__)


def register(db: Session, username: str, email: str, password: str) -> UserIdentity:
    if not username or not email or not password:
        raise InvalidOperation("Please enter all fields")

    # Check if user exists
    existing_user = db.query(User).filter((User.email == email) | (User.username == username)).first()
    if existing_user:
        raise Conflict("User already exists")

    new_user = User(username=username, email=email, password=hash_password(password), is_admin=False)
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User already exists")

    db.refresh(new_user)
    logger.info("Registered user %s (%s)", new_user.id, username)
    return UserIdentity.from_user(new_user)


def authenticate(db: Session, email: str, password: str) -> UserIdentity:
    if not email or not password:
        raise InvalidOperation("Please enter all fields")

    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(user.password, password):
        logger.warning("Failed login for %s", email)
        raise AuthError("Invalid credentials")
    return UserIdentity.from_user(user)


def verify_token(db: Session, token: str, settings: Settings) -> UserIdentity:
    user_id = decode_access_token(token, settings)
    # re-read the row so deleted users and changed admin flags apply at once
    user = db.get(User, user_id)
    if not user:
        logger.warning("Token presented for missing user %s", user_id)
        raise AuthError("Not authorized, user not found")
    return UserIdentity.from_user(user)


def seed_admin(db: Session, settings: Settings) -> User | None:
    """Create the configured administrator unless a user with that email exists."""
    if db.query(User).filter(User.email == settings.admin_email).first():
        return None

    if db.query(User).filter(User.username == settings.admin_username).first():
        logger.warning(
            "Default admin not created: username %r is taken by another account", settings.admin_username
        )
        return None

    admin = User(
        username=settings.admin_username,
        email=settings.admin_email,
        password=hash_password(settings.admin_password),
        is_admin=True,
    )
    db.add(admin)
    try:
        db.commit()
    except IntegrityError:
        # another process seeded or registered the same identity first
        db.rollback()
        logger.warning("Default admin not created: username or email already in use")
        return None
    db.refresh(admin)
    logger.info("Default admin user created.")
    return admin
