from sqlalchemy import Boolean, Column, Integer, String
from sqlalchemy.orm import relationship

from sharebox.models.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)
    is_admin = Column(Boolean, nullable=False, default=False)

    # One user → many files
    files = relationship("FileMeta", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<User id={self.id} username={self.username!r} admin={self.is_admin}>"
