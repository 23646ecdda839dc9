"""
Database package for the NetCommerce gateway.

Exports database initialization, models, and session management.
"""
from .init_db import initialize_database, get_db, get_async_session, create_engine_for, create_session_factory
from .models import (
    Base,
    OrderModel,
    OrderNoteModel,
    CartItemModel,
)

__all__ = [
    "initialize_database",
    "get_db",
    "get_async_session",
    "create_engine_for",
    "create_session_factory",
    "Base",
    "OrderModel",
    "OrderNoteModel",
    "CartItemModel",
]
