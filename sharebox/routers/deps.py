# sharebox/routers/deps.py
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from sharebox.core.config import Settings
from sharebox.core.errors import AuthError
from sharebox.core.security import UserIdentity
from sharebox.core.storage import Storage
from sharebox.services import admin as admin_service
from sharebox.services import auth as auth_service

bearer_scheme = HTTPBearer(auto_error=False)


# DB session dependency, one session per request
def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> UserIdentity:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Not authorized, no token")
    return auth_service.verify_token(db, credentials.credentials, settings)


def get_current_admin(user: UserIdentity = Depends(get_current_user)) -> UserIdentity:
    admin_service.require_admin(user)
    return user
