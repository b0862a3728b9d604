# sharebox/services/sharing.py
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from sharebox.core.errors import Conflict, Forbidden, InvalidOperation, NotFound
from sharebox.core.security import UserIdentity
from sharebox.models import FileMeta, ShareGrant, User, Visibility
from sharebox.services.access import Action, can_access
from sharebox.services.files import get_file

logger = logging.getLogger(__name__)


def _find_grant(db: Session, file_id: int, recipient_id: int) -> ShareGrant | None:
    return (
        db.query(ShareGrant)
        .filter(ShareGrant.file_id == file_id, ShareGrant.shared_with_id == recipient_id)
        .first()
    )


def create_grant(db: Session, acting_user: UserIdentity, file_id: int, recipient_email: str) -> tuple[ShareGrant, FileMeta, User]:
    """Share a private file owned by ``acting_user`` with the user registered under ``recipient_email``."""
    file = get_file(db, file_id)

    # owner-only: admins manage grants but do not create them on others' behalf
    if file.owner_id != acting_user.id:
        raise Forbidden("You can only share your own private files.")

    recipient = db.query(User).filter(User.email == recipient_email).first()

    # self-share is rejected whatever the visibility
    if recipient and recipient.id == acting_user.id:
        raise InvalidOperation("Cannot share a file with yourself.")

    if file.visibility != Visibility.private:
        raise Forbidden("You can only share your own private files.")

    if not recipient:
        raise NotFound("Recipient user not found.")

    if _find_grant(db, file.id, recipient.id):
        raise Conflict("File already shared with this user.")

    grant = ShareGrant(file_id=file.id, shared_by_id=acting_user.id, shared_with_id=recipient.id)
    db.add(grant)
    try:
        db.commit()
    except IntegrityError:
        # a concurrent request created the same grant after our check
        db.rollback()
        logger.info("Duplicate share of file %s with user %s rejected by constraint", file_id, recipient.id)
        raise Conflict("File already shared with this user.")

    db.refresh(grant)
    logger.info("User %s shared file %s with user %s", acting_user.id, file.id, recipient.id)
    return grant, file, recipient


def revoke_grant(db: Session, acting_user: UserIdentity, grant_id: int) -> tuple[FileMeta, User]:
    grant = db.get(ShareGrant, grant_id)
    if not grant:
        raise NotFound("Sharing entry not found.")

    file = grant.file
    if not can_access(db, acting_user, file, Action.manage_sharing):
        raise Forbidden("Not authorized to unshare this file.")

    recipient = grant.shared_with
    db.delete(grant)
    db.commit()
    logger.info("User %s revoked share %s on file %s", acting_user.id, grant_id, file.id)
    return file, recipient


def list_grants_for_file(db: Session, acting_user: UserIdentity, file_id: int) -> list[tuple[ShareGrant, User]]:
    file = get_file(db, file_id)
    if not can_access(db, acting_user, file, Action.manage_sharing):
        raise Forbidden("Not authorized to view sharing details for this file.")

    return (
        db.query(ShareGrant, User)
        .join(User, ShareGrant.shared_with_id == User.id)
        .filter(ShareGrant.file_id == file.id)
        .order_by(ShareGrant.id)
        .all()
    )
