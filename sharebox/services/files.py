# sharebox/services/files.py
"""
Upload, download and deletion of files.

Bytes live in a ``Storage`` backend and metadata in the ``files`` table. The two
are not covered by one transaction:

* upload writes the bytes first and removes them again if the row cannot be
  inserted
* delete removes the row (and its grants) first; failing to remove the bytes
  afterwards is reported as a warning, never rolled back
"""
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from werkzeug.utils import secure_filename

from sharebox.core.config import Settings
from sharebox.core.errors import Forbidden, InvalidOperation, NotFound, StorageError
from sharebox.core.security import UserIdentity
from sharebox.core.storage import Storage, StorageNotFound
from sharebox.models import FileMeta, ShareGrant, Visibility
from sharebox.services.access import Action, can_access

logger = logging.getLogger(__name__)


@dataclass
class DeleteResult:
    file_id: int
    original_name: str
    warning: str | None = None

    @property
    def message(self) -> str:
        if self.warning:
            return f"File deleted from database, but {self.warning}"
        return "File deleted successfully."


def get_file(db: Session, file_id: int) -> FileMeta:
    file = db.get(FileMeta, file_id)
    if not file:
        raise NotFound("File not found.")
    return file


def check_upload_allowed(original_name: str, size: int, settings: Settings) -> None:
    if not original_name:
        raise InvalidOperation("No file was uploaded.")
    if size > settings.max_upload_bytes:
        raise InvalidOperation("File too large.")
    extension = original_name.rsplit(".", 1)[-1].lower() if "." in original_name else ""
    if extension not in settings.allowed_extensions:
        raise InvalidOperation(
            "Invalid file type. Only common documents, images, and archives are allowed."
        )


def make_storage_key(owner_id: int, original_name: str) -> str:
    # grouped per user; the uuid keeps keys unique even for identical names
    safe_name = secure_filename(original_name) or "file"
    return f"{owner_id}/{uuid.uuid4().hex}_{safe_name}"


def upload(
    db: Session,
    storage: Storage,
    owner: UserIdentity,
    original_name: str,
    data: bytes,
    visibility: Visibility = Visibility.private,
    content_type: str | None = None,
) -> FileMeta:
    key = make_storage_key(owner.id, original_name)

    try:
        storage.put(key, data, content_type=content_type)
    except Exception:
        logger.exception("Failed to store upload %r for user %s", original_name, owner.id)
        raise StorageError("Server error during file upload.")

    meta = FileMeta(
        owner_id=owner.id,
        original_name=original_name,
        stored_name=key,
        size=len(data),
        visibility=visibility,
    )
    db.add(meta)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record upload %r for user %s", original_name, owner.id)
        try:
            storage.delete(key)
            logger.warning("Stored object %s removed after metadata insert failed", key)
        except Exception:
            logger.exception("Could not remove stored object %s after metadata insert failed", key)
        raise StorageError("Server error during file upload.")

    db.refresh(meta)
    logger.info("User %s uploaded file %s (%d bytes, %s)", owner.id, meta.id, meta.size, visibility.value)
    return meta


def download(db: Session, storage: Storage, user: UserIdentity, file_id: int) -> tuple[FileMeta, bytes]:
    file = get_file(db, file_id)
    if not can_access(db, user, file, Action.download):
        raise Forbidden("Not authorized to download this file.")

    try:
        data = storage.get(file.stored_name)
    except StorageNotFound:
        logger.error("Physical file missing for file %s (key %s)", file.id, file.stored_name)
        raise StorageError("The file content is missing on the server.")
    except Exception:
        logger.exception("Failed to read file %s (key %s)", file.id, file.stored_name)
        raise StorageError("Server error during file download.")

    return file, data


def remove_stored_object(storage: Storage, key: str) -> str | None:
    """Delete bytes after their row is gone. Returns a warning instead of raising."""
    try:
        storage.delete(key)
    except StorageNotFound:
        logger.warning("Stored object %s was already missing", key)
        return "physical file was already missing."
    except Exception:
        logger.exception("Failed to delete stored object %s, it is now orphaned", key)
        return "physical file deletion failed."
    return None


def delete_file(db: Session, storage: Storage, user: UserIdentity, file_id: int) -> DeleteResult:
    file = get_file(db, file_id)
    if not can_access(db, user, file, Action.delete):
        raise Forbidden("Not authorized to delete this file.")

    key = file.stored_name
    result = DeleteResult(file_id=file.id, original_name=file.original_name)

    # grants first, then the row, in one transaction
    db.query(ShareGrant).filter(ShareGrant.file_id == file.id).delete(synchronize_session="fetch")
    db.delete(file)
    db.commit()

    result.warning = remove_stored_object(storage, key)
    logger.info("User %s deleted file %s", user.id, result.file_id)
    return result
