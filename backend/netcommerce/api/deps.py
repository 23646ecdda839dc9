"""
Shared FastAPI dependencies for the gateway routes.
"""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..db.init_db import get_db
from ..models.gateway import GatewayConfig
from ..services.order_service import SqlOrderStore


def get_gateway_config() -> GatewayConfig:
    """Immutable gateway configuration built from settings."""
    return settings.gateway_config()


async def get_order_store(db: AsyncSession = Depends(get_db)) -> SqlOrderStore:
    return SqlOrderStore(db)
