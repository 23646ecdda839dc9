"""
NetCommerce Gateway Exception Hierarchy

Error codes for signing and callback failures.
All errors use the netcommerce: prefix.
"""
from typing import Optional, Dict, Any


class GatewayError(Exception):
    """
    Base exception for all gateway protocol errors.

    Every error is recoverable at the request level: callers map it to a
    fallback redirect or a generic message. Details never carry the secret.
    """

    status_code = 400

    def __init__(
        self,
        error_code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        self.error_code = error_code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API error response format."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details
        }


class MissingCallbackFieldError(GatewayError):
    """
    One or more of the eight required callback fields is absent.

    Example:
    - Callback posted without RespMsg
    """

    def __init__(self, missing: list[str]):
        super().__init__(
            "netcommerce:callback:missing_fields",
            f"Callback is missing required fields: {', '.join(missing)}",
            {"missing": missing}
        )
        self.missing = missing


class SignatureMismatchError(GatewayError):
    """
    Recomputed callback signature differs from the received one.

    Examples:
    - Tampered amount or result code
    - Callback signed with a different sha_key
    """

    def __init__(self, message: str = "Callback signature does not match", details: Optional[Dict[str, Any]] = None):
        super().__init__("netcommerce:callback:signature_mismatch", message, details)


class MalformedOrderReferenceError(GatewayError):
    """
    Order reference prefix is not a non-negative integer.

    Example:
    - txtIndex "abc_1712345678"
    """

    def __init__(self, order_reference: str):
        super().__init__(
            "netcommerce:callback:malformed_order_reference",
            "Order reference does not start with an order id",
            {"order_reference": order_reference}
        )


class UnsupportedCurrencyError(GatewayError):
    """
    Store currency has no NetCommerce numeric code.

    Raised at signing time, before any form is rendered.
    """

    def __init__(self, currency: str):
        super().__init__(
            "netcommerce:request:unsupported_currency",
            f"Currency {currency!r} is not supported by NetCommerce",
            {"currency": currency}
        )


class OrderNotFoundError(GatewayError):
    """Order id does not exist in the order store."""

    status_code = 404

    def __init__(self, order_id: int):
        super().__init__(
            "netcommerce:order:not_found",
            f"No order found with ID: {order_id}",
            {"order_id": order_id}
        )


class GatewayDisabledError(GatewayError):
    """Merchant has switched the gateway off."""

    status_code = 503

    def __init__(self):
        super().__init__(
            "netcommerce:gateway:disabled",
            "NetCommerce payments are currently unavailable"
        )
