# src/inkwell/models/user.py
"""SQLAlchemy model for registered accounts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from inkwell.db.session import Base, utcnow

from .role import Role


class User(Base):
    """Registered account; every user holds exactly one role."""

    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(100), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    user_email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    profile_picture: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    role_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("roles.role_id"),
        nullable=True,
    )

    role: Mapped[Role | None] = relationship(lazy="joined")

    @property
    def role_name(self) -> str | None:
        return self.role.role_name if self.role else None
