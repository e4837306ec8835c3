import psycopg_pool

from core.sources import PostgresOpportunitySource


pool: psycopg_pool.AsyncConnectionPool | None = None


async def init_pool(conninfo: str) -> None:
    """Initialize the async connection pool."""
    global pool
    pool = psycopg_pool.AsyncConnectionPool(
        conninfo=conninfo,
        min_size=2,
        max_size=10,
        open=False,
    )
    await pool.open()
    await pool.wait()


async def close_pool() -> None:
    """Close the connection pool."""
    global pool
    if pool:
        await pool.close()
        pool = None


async def provide_source() -> PostgresOpportunitySource:
    """Litestar dependency provider for the opportunity collaborator."""
    if not pool:
        raise RuntimeError("Database pool not initialized")
    return PostgresOpportunitySource(pool)
