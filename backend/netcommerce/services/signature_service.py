"""
Signature Service for NetCommerce Requests and Callbacks

Implements the SHA-256 signature scheme shared by both directions of the
protocol, plus the amount, currency and order reference canonicalization the
signatures are computed over.

Protocol notes:
- Signature input is a plain concatenation, no separators
- The secret is the last element of every concatenation
- Digest is lowercase hex
"""
import hashlib
import hmac
import threading
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

from ..exceptions import UnsupportedCurrencyError, MalformedOrderReferenceError


ORDER_REFERENCE_DELIMITER = "_"

# Largest id the orders table (SQLite INTEGER) can hold
MAX_ORDER_ID = 2**63 - 1

# Currency symbol -> (NetCommerce numeric code, minor unit digits)
CURRENCIES = {
    "USD": ("840", 2),
    "LBP": ("422", 0),
}


def compute_signature(*parts: str) -> str:
    """
    Hash the ordered concatenation of parts with SHA-256.

    Args:
        parts: Signature fields in protocol order, secret last

    Returns:
        64 character lowercase hex digest
    """
    message = "".join(parts)
    return hashlib.sha256(message.encode("utf-8")).hexdigest()


def signatures_match(expected: str, received: str) -> bool:
    """Constant-time comparison of two hex signatures."""
    return hmac.compare_digest(expected.encode("utf-8"), received.encode("utf-8"))


def currency_code_for(currency: str) -> str:
    """
    Map a currency symbol to its NetCommerce numeric code.

    Raises:
        UnsupportedCurrencyError: If the symbol has no code
    """
    try:
        return CURRENCIES[currency.upper()][0]
    except KeyError:
        raise UnsupportedCurrencyError(currency) from None


def format_amount(amount: Union[Decimal, int, float, str], currency: str) -> str:
    """
    Render an amount exactly as it is signed and sent.

    Zero minor unit currencies (LBP) render as a bare integer, others with
    two decimals. No grouping separators, half-up rounding.

    Examples:
        format_amount(Decimal("19.99"), "USD") -> "19.99"
        format_amount(150000, "LBP") -> "150000"
    """
    try:
        digits = CURRENCIES[currency.upper()][1]
    except KeyError:
        raise UnsupportedCurrencyError(currency) from None

    quantum = Decimal(1).scaleb(-digits)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)
    return f"{value:.{digits}f}"


class _ReferenceClock:
    """Nanosecond clock that never hands out the same value twice."""

    def __init__(self):
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> int:
        with self._lock:
            now = time.time_ns()
            self._last = now if now > self._last else self._last + 1
            return self._last


_reference_clock = _ReferenceClock()


def generate_order_reference(order_id: int) -> str:
    """
    Build a fresh txtIndex for an order.

    Must be regenerated on every submit to NetCommerce, even when the buyer
    comes back and resubmits the same order.
    """
    return f"{order_id}{ORDER_REFERENCE_DELIMITER}{_reference_clock.next()}"


def parse_order_reference(order_reference: str) -> int:
    """
    Extract the order id from a txtIndex.

    Only the segment before the first delimiter is used.

    Raises:
        MalformedOrderReferenceError: If the prefix is not a non-negative
            integer no larger than MAX_ORDER_ID
    """
    prefix = order_reference.split(ORDER_REFERENCE_DELIMITER, 1)[0]
    if not prefix.isascii() or not prefix.isdigit():
        raise MalformedOrderReferenceError(order_reference)

    digits = prefix.lstrip("0") or "0"
    if len(digits) > len(str(MAX_ORDER_ID)) or int(digits) > MAX_ORDER_ID:
        raise MalformedOrderReferenceError(order_reference)
    return int(digits)
