"""Data access helpers for users and roles."""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from inkwell.models.role import Role
from inkwell.models.user import User

__all__ = ["UserRepository"]


class UserRepository:
    """Thin wrapper around database access for user entities."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get_by_id(self, user_id: int) -> User | None:
        """Return a user by identifier, role included."""
        return self.session.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        return self.session.execute(
            select(User).where(User.user_email == email)
        ).scalars().first()

    def get_role(self, role_name: str) -> Role | None:
        return self.session.execute(
            select(Role).where(Role.role_name == role_name)
        ).scalars().first()

    def get_or_create_role(self, role_name: str) -> Role:
        """Return the role row named ``role_name``, inserting it if missing."""
        role = self.get_role(role_name)
        if role is None:
            role = Role(role_name=role_name)
            self.session.add(role)
            self.session.flush()
        return role

    def create(
        self,
        *,
        username: str,
        password_hash: str,
        email: str,
        role: Role,
        profile_picture: str | None = None,
    ) -> User:
        """Insert a new user and return the persisted ORM instance."""
        user = User(
            username=username,
            password_hash=password_hash,
            user_email=email,
            profile_picture=profile_picture,
            role_id=role.role_id,
        )
        user.role = role
        self.session.add(user)
        self.session.flush()
        return user

    def list_all(self) -> list[User]:
        """Return every user, newest first."""
        result = self.session.execute(
            select(User).order_by(User.created_at.desc(), User.user_id.desc())
        )
        return list(result.scalars().unique())
