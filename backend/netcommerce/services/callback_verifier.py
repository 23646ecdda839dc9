"""
Callback Verifier

Authenticates the callback NetCommerce posts back to the merchant.

Signature input, in protocol order (differs from the outbound request):
    txtMerchNum + txtIndex + txtAmount + txtCurrency + txtNumAut
    + RespVal + RespMsg + sha_key

Verification is pure: it reads the payload and the secret, nothing else.
"""
import logging
from typing import Any, Mapping

from ..exceptions import (
    GatewayError,
    MissingCallbackFieldError,
    SignatureMismatchError,
    MalformedOrderReferenceError,
)
from ..models.transactions import (
    CALLBACK_FIELDS,
    Accepted,
    CallbackPayload,
    RejectReason,
    Rejected,
    VerificationResult,
)
from .signature_service import compute_signature, parse_order_reference, signatures_match

logger = logging.getLogger(__name__)


_REJECT_REASONS = {
    MissingCallbackFieldError: RejectReason.MISSING_FIELDS,
    SignatureMismatchError: RejectReason.SIGNATURE_MISMATCH,
    MalformedOrderReferenceError: RejectReason.MALFORMED_ORDER_REFERENCE,
}


def callback_signature(payload: CallbackPayload, sha_key: str) -> str:
    """Expected signature for a callback payload."""
    return compute_signature(
        payload.merchant_number,
        payload.order_reference,
        payload.amount,
        payload.currency_code,
        payload.authorization_number,
        payload.result_value,
        payload.result_message,
        sha_key,
    )


def parse_callback(payload: Mapping[str, Any]) -> CallbackPayload:
    """
    Check presence of the eight callback fields.

    A field counts as present when the key exists and is not None; an empty
    string is present.

    Raises:
        MissingCallbackFieldError: Listing every absent field
    """
    missing = [name for name in CALLBACK_FIELDS if payload.get(name) is None]
    if missing:
        raise MissingCallbackFieldError(missing)

    return CallbackPayload(**{name: str(payload[name]) for name in CALLBACK_FIELDS})


def authenticate_callback(payload: Mapping[str, Any], sha_key: str) -> CallbackPayload:
    """
    Validate presence and signature of a callback.

    Args:
        payload: Form fields as received
        sha_key: Shared secret

    Returns:
        The authenticated CallbackPayload

    Raises:
        MissingCallbackFieldError: A required field is absent
        SignatureMismatchError: Signature does not match
    """
    callback = parse_callback(payload)

    expected = callback_signature(callback, sha_key)
    if not signatures_match(expected, callback.signature):
        raise SignatureMismatchError(details={"txtIndex": callback.order_reference})

    return callback


def verify_callback(payload: Mapping[str, Any], sha_key: str) -> VerificationResult:
    """
    Verify a NetCommerce callback.

    Args:
        payload: Form fields as received
        sha_key: Shared secret

    Returns:
        Accepted with the order id and result code when the signature
        matches, otherwise Rejected with the reason. Never raises for
        protocol errors.
    """
    try:
        callback = authenticate_callback(payload, sha_key)
        order_id = parse_order_reference(callback.order_reference)
    except GatewayError as e:
        reason = _REJECT_REASONS[type(e)]
        logger.warning(f"Rejected NetCommerce callback: {e.error_code} - {e.message}")
        return Rejected(reason=reason, detail=e.details)

    logger.debug(
        f"Authenticated NetCommerce callback: order_id={order_id}, "
        f"RespVal={callback.result_value!r}, txtNumAut={callback.authorization_number}"
    )

    return Accepted(
        order_id=order_id,
        order_reference=callback.order_reference,
        result_code=callback.result_code,
        result_value=callback.result_value,
        result_message=callback.result_message,
        authorization_number=callback.authorization_number,
    )
