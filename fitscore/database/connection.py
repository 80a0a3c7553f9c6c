from pathlib import Path

from psycopg_pool import ConnectionPool

from fitscore.config.settings import Settings

SCHEMA_PATH = Path(__file__).parent / "schema.sql"


def create_pool(settings: Settings) -> ConnectionPool:
    """Open a connection pool from settings. The caller owns and closes it."""
    conninfo = (
        f"host={settings.db_host} "
        f"port={settings.db_port} "
        f"dbname={settings.db_database} "
        f"user={settings.db_username} "
        f"password={settings.db_password}"
    )
    return ConnectionPool(conninfo, min_size=1, max_size=10, open=True)


def apply_schema(pool: ConnectionPool, schema_path: Path = SCHEMA_PATH) -> None:
    """Create the documents table and its indexes if they do not exist."""
    ddl = schema_path.read_text(encoding="utf-8")
    with pool.connection() as conn:
        conn.execute(ddl)
        conn.commit()
