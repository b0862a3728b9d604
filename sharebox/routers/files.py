import io
import mimetypes
from urllib.parse import quote

from fastapi import APIRouter, Depends, Form, UploadFile, File as FastAPIFile
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from sharebox.core.config import Settings
from sharebox.core.errors import InvalidOperation
from sharebox.core.security import UserIdentity
from sharebox.core.storage import Storage
from sharebox.models import Visibility
from sharebox.routers.deps import get_app_settings, get_current_user, get_db, get_storage
from sharebox.schemas import (
    FileOut,
    MessageResponse,
    SharedFileOut,
    ShareOut,
    ShareRequest,
    UploadResponse,
)
from sharebox.services import access, sharing
from sharebox.services import files as file_service

router = APIRouter(prefix="/api/files", tags=["files"])


# --- upload a new file ---
@router.post("/upload", response_model=UploadResponse, status_code=201)
async def upload_file(
    upload: UploadFile | None = FastAPIFile(None, alias="file"),
    visibility: Visibility = Form(Visibility.private),
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
    settings: Settings = Depends(get_app_settings),
):
    if upload is None or not upload.filename:
        raise InvalidOperation("No file was uploaded.")

    # reject on the declared size and type before touching the body
    file_service.check_upload_allowed(upload.filename, upload.size or 0, settings)

    # never buffer more than one byte past the limit
    content = await upload.read(settings.max_upload_bytes + 1)
    file_service.check_upload_allowed(upload.filename, len(content), settings)

    meta = file_service.upload(
        db,
        storage,
        user,
        upload.filename,
        content,
        visibility=visibility,
        content_type=upload.content_type,
    )
    return UploadResponse(message="File uploaded successfully", file=FileOut.model_validate(meta))


# --- files the user owns plus public ones (admins: everything) ---
@router.get("", response_model=list[FileOut])
def list_files(user: UserIdentity = Depends(get_current_user), db: Session = Depends(get_db)):
    return [FileOut.model_validate(f) for f in access.list_visible(db, user)]


@router.get("/shared-with-me", response_model=list[SharedFileOut])
def shared_with_me(user: UserIdentity = Depends(get_current_user), db: Session = Depends(get_db)):
    rows = access.list_shared_with_me(db, user)
    return [
        SharedFileOut(
            **FileOut.model_validate(file).model_dump(),
            share_id=grant.id,
            shared_at=grant.shared_at,
            shared_by_id=sharer.id,
            shared_by_username=sharer.username,
            shared_by_email=sharer.email,
        )
        for file, grant, sharer in rows
    ]


# --- download a file ---
@router.get("/download/{file_id}")
def download_file(
    file_id: int,
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    file, file_bytes = file_service.download(db, storage, user, file_id)
    content_type = mimetypes.guess_type(file.original_name)[0] or "application/octet-stream"

    return StreamingResponse(
        io.BytesIO(file_bytes),
        media_type=content_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(file.original_name)}"
        },
    )


# --- share a private file with another user ---
@router.post("/share", response_model=MessageResponse)
def share_file(
    payload: ShareRequest,
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    grant, file, recipient = sharing.create_grant(db, user, payload.file_id, payload.shared_with_email)
    return MessageResponse(
        message=f'File "{file.original_name}" shared successfully with {recipient.email}.'
    )


@router.get("/{file_id}/shared-with", response_model=list[ShareOut])
def shared_with(
    file_id: int,
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [
        ShareOut(
            share_id=grant.id,
            user_id=recipient.id,
            username=recipient.username,
            email=recipient.email,
            shared_at=grant.shared_at,
        )
        for grant, recipient in sharing.list_grants_for_file(db, user, file_id)
    ]


@router.delete("/unshare/{share_id}", response_model=MessageResponse)
def unshare_file(
    share_id: int,
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    file, recipient = sharing.revoke_grant(db, user, share_id)
    return MessageResponse(
        message=f'File "{file.original_name}" successfully unshared from {recipient.email}.'
    )


# --- delete a file ---
@router.delete("/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: int,
    user: UserIdentity = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    result = file_service.delete_file(db, storage, user, file_id)
    return MessageResponse(message=result.message, warning=result.warning)
