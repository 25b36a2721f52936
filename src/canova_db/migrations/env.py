"""Alembic environment for the form store.

The target database comes from :func:`load_database_settings` (psycopg2
URL, since Alembic runs synchronously) unless one is given on the command
line::

    alembic -x url=postgresql://user:pw@db/canova upgrade head

Migrations run without the runtime statement timeout: rewriting the JSONB
``pages`` column of a large table may take longer than a request is
allowed to.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from canova_db.config import load_database_settings
from canova_db.models.base import Base

# Register every table on Base.metadata
import canova_db.models.form  # noqa: F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    override = context.get_x_argument(as_dictionary=True).get("url")
    return override or load_database_settings().sync_url


def _configure(**kwargs) -> None:
    # compare_type so JSON <-> JSONB and enum changes show up in autogenerate
    context.configure(target_metadata=target_metadata, compare_type=True, **kwargs)


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting."""
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    config.set_main_option("sqlalchemy.url", _database_url())
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
