"""
Checkout API Endpoints

Hands a pending order over to NetCommerce.

Flow:
- process-payment returns the receipt page URL for the order
- the receipt page signs a fresh request and renders the auto-submit form
"""
from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse
from typing import Dict, Any
import logging

from ..exceptions import GatewayDisabledError, OrderNotFoundError, UnsupportedCurrencyError
from ..models.gateway import GatewayConfig
from ..services.order_service import SqlOrderStore
from ..services.redirect_form import render_payment_unavailable, render_redirect_form
from ..services.request_signer import sign_request
from ..services.signature_service import CURRENCIES
from .deps import get_gateway_config, get_order_store

logger = logging.getLogger(__name__)

router = APIRouter()

receipt_router = APIRouter()


@router.get("/gateway")
async def get_gateway_endpoint(
    gateway: GatewayConfig = Depends(get_gateway_config)
) -> Dict[str, Any]:
    """
    Describe the NetCommerce gateway for the checkout page.

    Returns:
        Title, description, icon, language, payment mode and supported
        currencies. Merchant credentials are never returned.

    Example:
        GET /api/gateway
    """
    view = gateway.public_view()
    view["supported_currencies"] = sorted(CURRENCIES)
    return view


@router.post("/checkout/{order_id}/process-payment")
async def process_payment_endpoint(
    order_id: int,
    store: SqlOrderStore = Depends(get_order_store),
    gateway: GatewayConfig = Depends(get_gateway_config)
) -> Dict[str, Any]:
    """
    Start a NetCommerce payment for an order.

    Path Parameters:
        order_id: Order identifier

    Returns:
        {
            "result": "success",
            "redirect": str  # receipt page that posts to NetCommerce
        }

    Example:
        POST /api/checkout/42/process-payment
    """
    if not gateway.enabled:
        raise GatewayDisabledError()

    order = await store.get_order(order_id)

    if not order:
        raise OrderNotFoundError(order_id)

    if not order.is_payable:
        raise HTTPException(
            status_code=409,
            detail={
                "error_code": "netcommerce:order:not_payable",
                "message": f"Order {order_id} cannot be paid in status {order.status.value}",
                "details": {"order_id": order_id, "status": order.status.value}
            }
        )

    logger.info(f"Processing NetCommerce payment for order {order_id}")

    return {
        "result": "success",
        "redirect": gateway.order_pay_url(order_id),
    }


@receipt_router.get("/checkout/order-pay/{order_id}", response_class=HTMLResponse)
async def receipt_page(
    order_id: int,
    store: SqlOrderStore = Depends(get_order_store),
    gateway: GatewayConfig = Depends(get_gateway_config)
) -> HTMLResponse:
    """
    Receipt page that posts the order to NetCommerce.

    A new txtIndex is generated on every render, so a buyer coming back and
    resubmitting never reuses a signed reference.

    Signing errors render a generic unavailable page; no request is sent.
    """
    order = await store.get_order(order_id)

    if not order or not order.is_payable:
        logger.warning(f"Receipt page requested for unpayable order {order_id}")
        return HTMLResponse(render_payment_unavailable(gateway), status_code=404)

    if not gateway.enabled:
        return HTMLResponse(render_payment_unavailable(gateway), status_code=503)

    try:
        parameters, _ = sign_request(order, gateway)
    except UnsupportedCurrencyError as e:
        logger.error(f"Cannot sign NetCommerce request for order {order_id}: {e.message}")
        return HTMLResponse(render_payment_unavailable(gateway), status_code=503)

    return HTMLResponse(render_redirect_form(parameters, gateway, order_id))
