"""
Alembic Environment Configuration

Migrations for the SQL Review Store (reviews and submission_records tables).

The database URL comes from DATABASE_URL via application settings, not from
alembic.ini, so migrations always target the same database as the service.

MIGRATION WORKFLOW:
===================
1. Change the models in reviewchain/models/
2. Run: alembic revision --autogenerate -m "description"
3. Review the generated migration in alembic/versions/
4. Run: alembic upgrade head

For SQLite, batch mode is enabled so ALTER TABLE changes are rendered as
table copies.
"""

from logging.config import fileConfig

from alembic import context
from reviewchain.config import get_settings
from reviewchain.database import Base, build_engine

# Register every model with Base.metadata before autogenerate runs
from reviewchain.models import Review, SubmissionRecord  # noqa: F401

settings = get_settings()

config = context.config
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    """
    Emit SQL without connecting.

    Usage:
        alembic upgrade head --sql > migration.sql
    """
    context.configure(
        url=settings.database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
        render_as_batch=settings.database_url.startswith("sqlite"),
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations against the configured database."""
    # build_engine creates the SQLite data directory if needed
    engine = build_engine(settings.database_url)

    with engine.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()

    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
