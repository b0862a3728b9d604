from sharebox.models.database import Base
from sharebox.models.file import FileMeta, Visibility
from sharebox.models.share import ShareGrant
from sharebox.models.user import User

__all__ = ["Base", "FileMeta", "ShareGrant", "User", "Visibility"]
