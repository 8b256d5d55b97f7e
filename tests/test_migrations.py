# tests/test_migrations.py
"""The Alembic history builds and tears down the full schema."""

from pathlib import Path

from alembic import command
from sqlalchemy import create_engine, inspect

from inkwell.scripts.migrate import build_config, run_upgrade_head


def test_upgrade_and_downgrade(tmp_path: Path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    run_upgrade_head(url)

    engine = create_engine(url)
    try:
        inspector = inspect(engine)
        assert {"roles", "users", "posts", "comments", "likes"} <= set(inspector.get_table_names())
        like_uniques = {c["name"] for c in inspector.get_unique_constraints("likes")}
        assert "uq_likes_user_target" in like_uniques
        assert "idx_likes_target" in {i["name"] for i in inspector.get_indexes("likes")}

        command.downgrade(build_config(url), "base")
        assert set(inspect(engine).get_table_names()) <= {"alembic_version"}
    finally:
        engine.dispose()
