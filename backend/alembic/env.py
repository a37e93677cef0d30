"""
Alembic environment for the Learnit schema.

Migrations run with the synchronous driver (DATABASE_URL_SYNC); the app
itself uses the async engine. `alembic -x url=...` points a single run at
another database, e.g. a scratch SQLite file.
"""

from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool
from alembic import context

from learnit.core.config import get_settings
from learnit.db.base import Base
import learnit.models  # noqa: F401  registers every table on Base.metadata

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)


def _database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    return override or get_settings().DATABASE_URL_SYNC


def _configure(**kwargs) -> None:
    url = _database_url()
    context.configure(
        target_metadata=Base.metadata,
        compare_type=True,
        # SQLite cannot ALTER most constraints in place
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_offline() -> None:
    """Emit the migration as SQL text."""
    _configure(url=_database_url(), literal_binds=True, dialect_opts={"paramstyle": "named"})
    with context.begin_transaction():
        context.run_migrations()


def run_online() -> None:
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = _database_url()
    engine = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    with engine.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_offline()
else:
    run_online()
