"""
Callback API Endpoint

Receives the result NetCommerce posts back after the buyer pays.

Every outcome ends in a redirect:
- signature matched: order confirmation page (approved or declined)
- anything else: cart page, order untouched
"""
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse
import logging

from ..models.gateway import CALLBACK_ROUTE, GatewayConfig
from ..services.callback_service import process_callback
from ..services.order_service import SqlOrderStore
from .deps import get_gateway_config, get_order_store

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(CALLBACK_ROUTE)
async def netcommerce_callback(
    request: Request,
    store: SqlOrderStore = Depends(get_order_store),
    gateway: GatewayConfig = Depends(get_gateway_config)
) -> RedirectResponse:
    """
    Handle a NetCommerce callback.

    Form Fields:
        txtMerchNum, txtIndex, txtAmount, txtCurrency, txtNumAut,
        RespVal, RespMsg, signature

    Returns:
        303 redirect to the order confirmation or the cart page
    """
    form = await request.form()
    payload = {key: value for key, value in form.items() if isinstance(value, str)}

    logger.info(f"Received NetCommerce callback: txtIndex={payload.get('txtIndex')}")

    try:
        outcome = await process_callback(store, payload, gateway)
    except Exception:
        logger.exception(f"NetCommerce callback handler error (txtIndex={payload.get('txtIndex')})")
        return RedirectResponse(gateway.cart_url(), status_code=303)

    if not outcome.accepted:
        logger.warning(
            f"NetCommerce callback rejected: reason={outcome.result.reason.value}, "
            f"txtIndex={payload.get('txtIndex')}"
        )

    return RedirectResponse(outcome.redirect_url, status_code=303)
