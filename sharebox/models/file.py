# sharebox/models/file.py
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from sharebox.models.database import Base


class Visibility(str, enum.Enum):
    private = "private"
    public = "public"


class FileMeta(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    original_name = Column(String, nullable=False)               # Name user uploaded
    stored_name = Column(String, nullable=False, unique=True)    # Storage key
    size = Column(Integer, nullable=False)                       # Size in bytes
    visibility = Column(
        Enum(Visibility, native_enum=False, length=16),
        nullable=False,
        default=Visibility.private,
    )
    uploaded_at = Column(DateTime, default=datetime.utcnow)

    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # Many files → one owner (User)
    owner = relationship("User", back_populates="files")

    # grants die with the file
    shares = relationship("ShareGrant", back_populates="file", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.public
