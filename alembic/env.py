"""
Alembic migration environment for the cellar SQLite database.

ensure_schema() passes the target through sqlalchemy.url; the alembic CLI
falls back to Config.database_path() (DATABASE_PATH or cellar/data/cellar.db).
"""

import sys
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import create_engine

# Project root on the path so cellar imports work from the alembic CLI
sys.path.insert(0, str(Path(__file__).parent.parent))

from cellar.config import Config

config = context.config
# ensure_schema() runs inside the app and keeps the app's logging setup
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or f"sqlite:///{Config.database_path()}"


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of touching a database."""
    context.configure(
        url=database_url(),
        target_metadata=None,
        literal_binds=True,
        render_as_batch=True,
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    engine = create_engine(database_url())
    try:
        with engine.connect() as connection:
            # SQLite cannot ALTER most constraints; batch mode rebuilds tables
            context.configure(connection=connection, target_metadata=None, render_as_batch=True)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
