# sharebox/services/admin.py
import logging

from sqlalchemy.orm import Session

from sharebox.core.errors import Forbidden, InvalidOperation, NotFound
from sharebox.core.security import UserIdentity
from sharebox.core.storage import Storage
from sharebox.models import FileMeta, ShareGrant, User
from sharebox.services.files import DeleteResult, delete_file, remove_stored_object

logger = logging.getLogger(__name__)


def require_admin(user: UserIdentity) -> None:
    if not user.is_admin:
        raise Forbidden("Not authorized as an admin")


def list_all_users(db: Session, acting_admin: UserIdentity) -> list[dict]:
    require_admin(acting_admin)
    users = db.query(User).order_by(User.id).all()
    # never hand out the password hash
    return [
        {"id": u.id, "username": u.username, "email": u.email, "is_admin": bool(u.is_admin)}
        for u in users
    ]


def _get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user


def delete_user(db: Session, storage: Storage, acting_admin: UserIdentity, target_id: int) -> list[str]:
    """Delete a user together with their files and every grant touching them.

    Returns warnings for stored objects that could not be removed afterwards.
    """
    require_admin(acting_admin)
    if target_id == acting_admin.id:
        raise Forbidden("Cannot delete your own admin account through this interface.")

    user = _get_user(db, target_id)
    files = db.query(FileMeta).filter(FileMeta.owner_id == user.id).all()
    file_ids = [f.id for f in files]
    keys = [f.stored_name for f in files]

    db.query(ShareGrant).filter(
        ShareGrant.file_id.in_(file_ids)
        | (ShareGrant.shared_by_id == user.id)
        | (ShareGrant.shared_with_id == user.id)
    ).delete(synchronize_session="fetch")
    for f in files:
        db.delete(f)
    db.delete(user)
    db.commit()
    logger.info("Admin %s deleted user %s and %d file(s)", acting_admin.id, target_id, len(keys))

    warnings = []
    for key in keys:
        warning = remove_stored_object(storage, key)
        if warning:
            warnings.append(f"{key}: {warning}")
    return warnings


def set_admin_flag(db: Session, acting_admin: UserIdentity, target_id: int, value) -> User:
    require_admin(acting_admin)
    if not isinstance(value, bool):
        raise InvalidOperation("Invalid value for is_admin. Must be true or false.")
    if target_id == acting_admin.id:
        raise Forbidden("Cannot change your own admin status.")

    user = _get_user(db, target_id)
    user.is_admin = value
    db.commit()
    db.refresh(user)
    logger.info("Admin %s set is_admin=%s for user %s", acting_admin.id, value, target_id)
    return user


def delete_file_as_admin(db: Session, storage: Storage, acting_admin: UserIdentity, file_id: int) -> DeleteResult:
    require_admin(acting_admin)
    return delete_file(db, storage, acting_admin, file_id)
