import os
import uuid
from collections.abc import Generator

import pytest
from psycopg_pool import ConnectionPool

from fitscore.config.settings import Settings
from fitscore.database.connection import apply_schema, create_pool


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "fitscore_test")
    return Settings()


@pytest.fixture(scope="session")
def integration_pool() -> Generator[ConnectionPool, None, None]:
    pool = create_pool(_test_settings())
    try:
        pool.wait(timeout=5.0)
        apply_schema(pool)
    except Exception as e:
        pool.close()
        pytest.skip(f"PostgreSQL test DB not available: {e}. Set DB_* env to run.")
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture
def collection(integration_pool: ConnectionPool) -> Generator[str, None, None]:
    """A collection name unique to the test, emptied afterwards."""
    name = f"test-{uuid.uuid4().hex[:12]}"
    yield name
    with integration_pool.connection() as conn:
        conn.execute("DELETE FROM documents WHERE collection = %s", (name,))
        conn.commit()
