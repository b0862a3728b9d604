# sharebox/services/access.py
"""
Access decisions for (user, file) pairs.

Every call reads the current rows; nothing is cached, so a revoked grant stops
working on the very next request.

Precedence, first match wins:

1. administrators may do anything
2. the owner may do anything
3. anyone may view or download a public file
4. a share recipient may view or download the shared file
5. everything else is denied

Deleting a file and managing its grants are only reachable through 1 or 2.
"""
import enum

from sqlalchemy.orm import Session

from sharebox.core.security import UserIdentity
from sharebox.models import FileMeta, ShareGrant, User, Visibility


class Action(str, enum.Enum):
    view = "view"
    download = "download"
    delete = "delete"
    manage_sharing = "manage-sharing"


READ_ACTIONS = frozenset({Action.view, Action.download})


def has_grant(db: Session, file_id: int, user_id: int) -> bool:
    return (
        db.query(ShareGrant.id)
        .filter(ShareGrant.file_id == file_id, ShareGrant.shared_with_id == user_id)
        .first()
        is not None
    )


def can_access(db: Session, user: UserIdentity, file: FileMeta, action: Action) -> bool:
    if user.is_admin:
        return True
    if file.owner_id == user.id:
        return True
    if action not in READ_ACTIONS:
        return False
    if file.visibility == Visibility.public:
        return True
    return has_grant(db, file.id, user.id)


def list_visible(db: Session, user: UserIdentity) -> list[FileMeta]:
    """Files the user owns plus every public file; admins get everything.

    Files shared with the user are listed separately by ``list_shared_with_me``.
    """
    query = db.query(FileMeta)
    if not user.is_admin:
        query = query.filter(
            (FileMeta.owner_id == user.id) | (FileMeta.visibility == Visibility.public)
        )
    return query.order_by(FileMeta.id).all()


def list_shared_with_me(db: Session, user: UserIdentity) -> list[tuple[FileMeta, ShareGrant, User]]:
    """(file, grant, sharer) rows for every grant naming the user, oldest grant first."""
    return (
        db.query(FileMeta, ShareGrant, User)
        .join(ShareGrant, ShareGrant.file_id == FileMeta.id)
        .join(User, ShareGrant.shared_by_id == User.id)
        .filter(ShareGrant.shared_with_id == user.id)
        .order_by(ShareGrant.id)
        .all()
    )
