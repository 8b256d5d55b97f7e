# src/inkwell/models/role.py
"""Role lookup table."""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from inkwell.db.session import Base


class Role(Base):
    """Named permission tier; rows are created lazily by name."""

    __tablename__ = "roles"

    role_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    role_name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
