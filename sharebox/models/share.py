# sharebox/models/share.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import relationship

from sharebox.models.database import Base


class ShareGrant(Base):
    """Read access to one private file, granted by its owner to one other user."""

    __tablename__ = "shared_files"

    id = Column(Integer, primary_key=True, index=True)
    file_id = Column(Integer, ForeignKey("files.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_by_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shared_with_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    shared_at = Column(DateTime, default=datetime.utcnow)

    file = relationship("FileMeta", back_populates="shares")
    shared_by = relationship("User", foreign_keys=[shared_by_id])
    shared_with = relationship("User", foreign_keys=[shared_with_id])

    __table_args__ = (
        UniqueConstraint("file_id", "shared_with_id", name="uq_share_file_recipient"),
    )
