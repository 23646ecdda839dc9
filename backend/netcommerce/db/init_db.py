"""
Database Initialization

Creates SQLite tables backing the order store: orders, order_notes,
cart_items. Also provides the async SQLAlchemy session setup for FastAPI.
"""
import logging
import sqlite3
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import create_async_engine, AsyncEngine, AsyncSession, async_sessionmaker

from ..config import settings

logger = logging.getLogger(__name__)


def create_tables(conn: sqlite3.Connection) -> None:
    """
    Create all database tables with indexes.

    Tables:
    - orders: Order records with status and payment reference
    - order_notes: Append-only payment audit notes
    - cart_items: Pending cart lines per buyer session

    Also enables WAL mode for better concurrency.
    """
    cursor = conn.cursor()

    # WAL lets callback retries read while another callback writes
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=30000")
    cursor.execute("PRAGMA synchronous=NORMAL")

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS orders (
            id INTEGER PRIMARY KEY,
            status TEXT NOT NULL DEFAULT 'pending'
                CHECK(status IN ('pending', 'on_hold', 'paid', 'failed', 'cancelled')),
            total TEXT NOT NULL,
            currency TEXT NOT NULL DEFAULT 'USD',
            customer_id INTEGER,
            cart_session_id TEXT,
            payment_reference TEXT,
            billing_first_name TEXT,
            billing_last_name TEXT,
            billing_email TEXT,
            billing_phone TEXT,
            billing_address_1 TEXT,
            billing_address_2 TEXT,
            billing_city TEXT,
            billing_state TEXT,
            billing_postcode TEXT,
            billing_country TEXT,
            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_orders_status ON orders(status)")
    cursor.execute("CREATE INDEX IF NOT EXISTS idx_orders_cart_session ON orders(cart_session_id)")

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS order_notes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            order_id INTEGER NOT NULL,
            note TEXT NOT NULL,
            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (order_id) REFERENCES orders(id)
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_order_notes_order_id ON order_notes(order_id)")

    cursor.execute("""
        CREATE TABLE IF NOT EXISTS cart_items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            session_id TEXT NOT NULL,
            product_id TEXT NOT NULL,
            quantity INTEGER NOT NULL DEFAULT 1,
            created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
    """)

    cursor.execute("CREATE INDEX IF NOT EXISTS idx_cart_items_session ON cart_items(session_id)")

    conn.commit()
    logger.debug("All tables created successfully")


def seed_demo_data(conn: sqlite3.Connection) -> None:
    """Insert a pending demo order (id 42) with a one-line cart, if absent."""
    cursor = conn.cursor()
    cursor.execute("""
        INSERT OR IGNORE INTO orders (
            id, status, total, currency, customer_id, cart_session_id,
            billing_first_name, billing_last_name, billing_email, billing_phone,
            billing_city, billing_country
        )
        VALUES (42, 'pending', '19.99', 'USD', 7, 'sess_demo',
                'Rami', 'Haddad', 'rami@example.com', '+961 3 123 456',
                'Beirut', 'LB')
    """)
    if cursor.rowcount:
        cursor.execute(
            "INSERT INTO cart_items (session_id, product_id, quantity) VALUES ('sess_demo', 'SKU001', 1)"
        )
    conn.commit()


def initialize_database(database_path: Optional[str] = None, seed: bool = False) -> None:
    """
    Initialize the database with all required tables.

    Called during FastAPI startup.
    """
    db_path = Path(database_path or settings.database_path)

    logger.info(f"Initializing database at: {db_path}")

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    try:
        create_tables(conn)
        if seed:
            seed_demo_data(conn)
    finally:
        conn.close()


# ============================================================================
# SQLAlchemy Async Session Setup for FastAPI
# ============================================================================

def create_engine_for(database_path: str, **kwargs) -> AsyncEngine:
    """Async engine for a SQLite file."""
    return create_async_engine(
        f"sqlite+aiosqlite:///{database_path}",
        echo=False,
        connect_args={
            "timeout": 30,  # lock acquisition
            "check_same_thread": False
        },
        **kwargs
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


engine = create_engine_for(settings.database_path, pool_pre_ping=True, pool_recycle=3600)

AsyncSessionLocal = create_session_factory(engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency for getting async database sessions in FastAPI.

    Usage:
        @app.get("/endpoint")
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            ...
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


# Alias for FastAPI Depends
get_db = get_async_session


def main():
    """CLI entry point for initializing database."""
    logging.basicConfig(level=getattr(logging, settings.log_level))
    initialize_database(seed=settings.demo_mode)


if __name__ == "__main__":
    main()
