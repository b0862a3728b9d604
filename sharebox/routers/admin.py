from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from sharebox.core.security import UserIdentity
from sharebox.core.storage import Storage
from sharebox.routers.deps import get_current_admin, get_db, get_storage
from sharebox.schemas import AdminFlagRequest, MessageResponse, UserOut
from sharebox.services import admin as admin_service

# every route here requires an authenticated administrator
router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/users", response_model=list[UserOut])
def list_users(admin: UserIdentity = Depends(get_current_admin), db: Session = Depends(get_db)):
    return admin_service.list_all_users(db, admin)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    admin: UserIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    warnings = admin_service.delete_user(db, storage, admin, user_id)
    return MessageResponse(
        message="User and their files deleted successfully",
        warning="; ".join(warnings) or None,
    )


@router.put("/users/{user_id}/admin", response_model=MessageResponse)
def update_admin_status(
    user_id: int,
    payload: AdminFlagRequest,
    admin: UserIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    user = admin_service.set_admin_flag(db, admin, user_id, payload.is_admin)
    return MessageResponse(message=f"User ID {user.id} admin status updated to {user.is_admin}.")


@router.delete("/files/{file_id}", response_model=MessageResponse)
def delete_any_file(
    file_id: int,
    admin: UserIdentity = Depends(get_current_admin),
    db: Session = Depends(get_db),
    storage: Storage = Depends(get_storage),
):
    result = admin_service.delete_file_as_admin(db, storage, admin, file_id)
    return MessageResponse(message=result.message, warning=result.warning)
