"""SQLAlchemy engine construction for the job state store."""

from sqlalchemy import Engine, create_engine


def db_create_engine(database_url: str, pool_size: int = 5) -> Engine:
    """Create the engine shared by job state, component hash and health services.

    Args:
        database_url: SQLAlchemy database URL.
        pool_size: Persistent connections kept by the pool.

    Returns:
        Engine: Engine with liveness checks on checkout.

    Raises:
        ValueError: Raised when the database URL is blank.
    """

    if not database_url.strip():
        raise ValueError("database_url must not be blank")

    return create_engine(database_url, pool_pre_ping=True, pool_size=pool_size)
