# sharebox/schemas.py
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict

from sharebox.models import Visibility


class RegisterRequest(BaseModel):
    username: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    is_admin: bool


class AuthResponse(BaseModel):
    message: str
    user: UserOut
    token: str


class FileOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    owner_id: int
    original_name: str
    size: int
    visibility: Visibility
    uploaded_at: datetime


class UploadResponse(BaseModel):
    message: str
    file: FileOut


class SharedFileOut(FileOut):
    share_id: int
    shared_at: datetime
    shared_by_id: int
    shared_by_username: str
    shared_by_email: str


class ShareRequest(BaseModel):
    file_id: int
    shared_with_email: str


class ShareOut(BaseModel):
    share_id: int
    user_id: int
    username: str
    email: str
    shared_at: datetime


class AdminFlagRequest(BaseModel):
    # left loose so non-boolean values reach the service and are rejected there
    is_admin: Any = None


class MessageResponse(BaseModel):
    message: str
    warning: str | None = None
