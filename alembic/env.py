"""Alembic environment for the rollout job state tables.

`DATABASE_URL` from the rollout settings always wins over `sqlalchemy.url`
in alembic.ini.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool

from rollout_manager.config import config_load_database_url

alembic_config = context.config
if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

# Migrations are hand-written SQL; there is no ORM metadata to autogenerate from.
target_metadata = None


def run_rollout_migrations_offline(database_url: str) -> None:
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_rollout_migrations_online(database_url: str) -> None:
    engine = create_engine(database_url, poolclass=pool.NullPool)
    try:
        with engine.connect() as connection:
            context.configure(connection=connection, target_metadata=target_metadata)
            with context.begin_transaction():
                context.run_migrations()
    finally:
        engine.dispose()


_database_url = config_load_database_url()
if context.is_offline_mode():
    run_rollout_migrations_offline(_database_url)
else:
    run_rollout_migrations_online(_database_url)
