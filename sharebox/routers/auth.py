from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sharebox.core.config import Settings
from sharebox.core.security import UserIdentity, create_access_token
from sharebox.routers.deps import get_app_settings, get_current_user, get_db
from sharebox.schemas import AuthResponse, LoginRequest, RegisterRequest, UserOut
from sharebox.services import auth as auth_service

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(message: str, identity: UserIdentity, settings: Settings) -> AuthResponse:
    return AuthResponse(
        message=message,
        user=UserOut.model_validate(identity),
        token=create_access_token(identity.id, identity.is_admin, settings),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    identity = auth_service.register(db, payload.username, payload.email, payload.password)
    return _auth_response("User registered successfully", identity, settings)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    identity = auth_service.authenticate(db, payload.email, payload.password)
    return _auth_response("Logged in successfully", identity, settings)


@router.get("/me", response_model=UserOut)
def me(user: UserIdentity = Depends(get_current_user)):
    return UserOut.model_validate(user)
