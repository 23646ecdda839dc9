"""
Request Signer

Builds the signed parameter set the buyer is redirected to NetCommerce with.

Signature input, in protocol order:
    txtAmount + txtCurrency + txtIndex + txtMerchNum + txthttp + sha_key

Signing never mutates the order.
"""
import re
import logging
from typing import Dict, Tuple, Optional

from ..models.gateway import GatewayConfig
from ..models.orders import Order
from ..models.transactions import TransactionRequest
from .signature_service import (
    compute_signature,
    currency_code_for,
    format_amount,
    generate_order_reference,
)

logger = logging.getLogger(__name__)


def build_transaction_request(
    order: Order,
    gateway: GatewayConfig,
    callback_url: str,
    currency: Optional[str] = None,
) -> TransactionRequest:
    """
    Sign the transaction fields of an order.

    Args:
        order: Order to pay
        gateway: Gateway configuration holding merchant number and sha_key
        callback_url: Return URL NetCommerce posts the result to
        currency: Currency symbol, defaults to the order's currency

    Returns:
        TransactionRequest with a fresh order reference and its signature

    Raises:
        UnsupportedCurrencyError: Before anything is signed
    """
    currency = currency or order.currency

    currency_code = currency_code_for(currency)
    amount = format_amount(order.total, currency)
    order_reference = generate_order_reference(order.id)

    signature = compute_signature(
        amount,
        currency_code,
        order_reference,
        gateway.merchant_number,
        callback_url,
        gateway.sha_key,
    )

    logger.debug(
        f"Signed request for order {order.id}: txtIndex={order_reference}, "
        f"txtAmount={amount}, txtCurrency={currency_code}"
    )

    return TransactionRequest(
        order_reference=order_reference,
        amount=amount,
        currency_code=currency_code,
        merchant_number=gateway.merchant_number,
        callback_url=callback_url,
        signature=signature,
    )


def buyer_fields(order: Order, gateway: GatewayConfig) -> Dict[str, Optional[str]]:
    """
    Informational buyer fields. Not part of the signature.

    Mobile is digits only, e.g. 009613123456.
    """
    billing = order.billing
    mobile = re.sub(r"\D", "", billing.phone or "")

    return {
        "address_line1": billing.address_1,
        "address_line2": billing.address_2,
        "city": billing.city,
        "country": billing.country,
        "customer_id": str(order.customer_id) if order.customer_id else None,
        "email": billing.email,
        "first_name": billing.first_name,
        "last_name": billing.last_name,
        "Lng": gateway.language,
        "mobile": mobile,
        "payment_mode": gateway.payment_mode,
        "postal_code": billing.postcode,
        "state": billing.state,
    }


def sign_request(
    order: Order,
    gateway: GatewayConfig,
    callback_url: Optional[str] = None,
    currency: Optional[str] = None,
) -> Tuple[Dict[str, str], str]:
    """
    Produce the full outbound parameter set for an order.

    Args:
        order: Order to pay
        gateway: Gateway configuration
        callback_url: Defaults to the gateway's fixed callback route
        currency: Currency symbol, defaults to the order's currency

    Returns:
        (parameters, signature). Empty or absent values are dropped from
        parameters; NetCommerce rejects unexpected empty fields.
    """
    request = build_transaction_request(
        order,
        gateway,
        callback_url or gateway.callback_url(),
        currency=currency,
    )

    args: Dict[str, Optional[str]] = buyer_fields(order, gateway)
    args.update(request.model_dump(by_alias=True))

    parameters = {key: value for key, value in args.items() if value not in (None, "")}

    logger.info(f"Prepared NetCommerce request for order {order.id} (txtIndex={request.order_reference})")

    return parameters, request.signature
