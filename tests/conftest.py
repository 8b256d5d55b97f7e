# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-for-inkwell")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("INIT_DB_ON_STARTUP", "false")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("ADMIN_EMAIL", "admin@inkwell.test")

from inkwell.core.roles import ADMIN, AUTHOR, READER  # noqa: E402
from inkwell.core.security import create_access_token, hash_password  # noqa: E402
from inkwell.db.session import Base, build_engine  # noqa: E402
from inkwell.db.session import get_db as app_get_session  # noqa: E402
from inkwell.main import app as fastapi_app  # noqa: E402
from inkwell.models import Comment, Like, Post, User  # noqa: E402
from inkwell.repositories import UserRepository  # noqa: E402
from inkwell.services.media import LocalMediaStorage, get_media_storage  # noqa: E402

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "pw123456"

_USER_COUNTER = count(1)
_POST_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        # Ensure each test sees a clean database even though services commit.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def media_storage(tmp_path: Path) -> LocalMediaStorage:
    return LocalMediaStorage(tmp_path / "media", "/media", 1024 * 1024)


@pytest.fixture(autouse=True)
def override_dependencies(
    app: FastAPI, db_session: Session, media_storage: LocalMediaStorage
) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_media_storage] = lambda: media_storage
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_media_storage, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists a user with the given role."""

    def _make_user(
        role: str = READER,
        username: str | None = None,
        email: str | None = None,
        password: str = TEST_PASSWORD,
        profile_picture: str | None = None,
    ) -> User:
        n = next(_USER_COUNTER)
        repo = UserRepository(db_session)
        user = repo.create(
            username=username or f"user{n}",
            password_hash=hash_password(password),
            email=email or f"user{n}@example.com",
            role=repo.get_or_create_role(role),
            profile_picture=profile_picture,
        )
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(user.user_id, user.role_id)
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def reader(make_user: Callable[..., User]) -> User:
    return make_user(READER, username="alice")


@pytest.fixture()
def author(make_user: Callable[..., User]) -> User:
    return make_user(AUTHOR, username="bob")


@pytest.fixture()
def admin(make_user: Callable[..., User]) -> User:
    return make_user(ADMIN, username="root")


@pytest.fixture()
def reader_headers(reader: User, headers_for) -> dict[str, str]:
    return headers_for(reader)


@pytest.fixture()
def author_headers(author: User, headers_for) -> dict[str, str]:
    return headers_for(author)


@pytest.fixture()
def admin_headers(admin: User, headers_for) -> dict[str, str]:
    return headers_for(admin)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory that persists a post directly, bypassing the API."""

    def _make_post(
        author: User,
        title: str | None = None,
        status: str = "published",
        tags: list[str] | None = None,
        excerpt: str = "A short excerpt",
        content: str = "<p>Body</p>",
    ) -> Post:
        n = next(_POST_COUNTER)
        post = Post(
            title=title or f"Post {n}",
            excerpt=excerpt,
            content=content,
            tags=tags or [],
            author_id=author.user_id,
            status=status,
            slug=f"post-{n}-{author.user_id}",
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make_post


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    def _make_comment(
        author: User,
        post: Post,
        parent: Comment | None = None,
        content: str = "Nice post",
    ) -> Comment:
        comment = Comment(
            content=content,
            author_id=author.user_id,
            post_id=post.post_id,
            parent_comment_id=parent.comment_id if parent else None,
        )
        db_session.add(comment)
        db_session.commit()
        return comment

    return _make_comment


@pytest.fixture()
def make_like(db_session: Session) -> Callable[..., Like]:
    def _make_like(user: User, target_type: str, target_id: int, like_type: str = "like") -> Like:
        like = Like(
            user_id=user.user_id,
            target_type=target_type,
            target_id=target_id,
            like_type=like_type,
        )
        db_session.add(like)
        db_session.commit()
        return like

    return _make_like
