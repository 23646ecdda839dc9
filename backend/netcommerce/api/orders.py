"""
Orders API Endpoints

Read-only view of an order's payment state for the confirmation page.
"""
from fastapi import APIRouter, Depends
from typing import Dict, Any
import logging

from ..exceptions import OrderNotFoundError
from ..services.order_service import SqlOrderStore
from .deps import get_order_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{order_id}")
async def get_order_endpoint(
    order_id: int,
    store: SqlOrderStore = Depends(get_order_store)
) -> Dict[str, Any]:
    """
    Get order payment details.

    Path Parameters:
        order_id: Order identifier

    Returns:
        Status, total, payment reference (NetCommerce authorization number)
        and audit notes

    Example:
        GET /api/orders/42
    """
    logger.debug(f"Retrieving order: {order_id}")

    order = await store.get_order(order_id)

    if not order:
        raise OrderNotFoundError(order_id)

    return {
        "order_id": order.id,
        "status": order.status.value,
        "total": str(order.total),
        "currency": order.currency,
        "payment_reference": order.payment_reference,
        "notes": [
            {
                "note": n.note,
                "created_at": n.created_at.isoformat() if n.created_at else None,
            }
            for n in order.notes
        ],
    }
