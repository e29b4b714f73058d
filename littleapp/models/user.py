"""
Little Application: User SQLAlchemy Model
============================================

What:  ORM model representing the `users` table.
Who:   AuthService, UserService (admin CRUD) and the ownership checks in the
       post, course and review services.

Roles:
    user: may read everything and review posts
    publisher: may create posts and courses, edit the ones they own
    admin: may edit anything (cannot self-register)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from littleapp.database import Base


class User(Base):
    """An account that owns posts, courses and reviews."""

    __tablename__ = "users"

    # Never filtered, selected, sorted or serialized by the list pipeline
    PRIVATE_FIELDS = frozenset({"password_hash"})

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")

    # pbkdf2_sha256 hash; never serialized
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
