"""
Mock NetCommerce Hosted Processor

Simulates the processor side of the protocol for tests and local demos:
checks the signature of an incoming redirect request and produces the signed
callback NetCommerce would post back.

Mock Behavior:
- Requests with a bad signature are refused
- Test buyer emails trigger specific results
- Other requests have ~90% approval rate based on a deterministic hash
"""
import hashlib
from typing import Any, Dict, Mapping, Optional

from ..services.signature_service import compute_signature, signatures_match


# Buyer emails that trigger specific results
RESULT_EMAILS = {
    "decline@example.com": ("0", "Transaction declined"),
    "unknown@example.com": ("7", "Transaction pending review"),
}

APPROVED_MESSAGE = "Transaction approved"


def verify_request(parameters: Mapping[str, Any], sha_key: str) -> bool:
    """
    Check a redirect request the way the processor does.

    Returns:
        True if the signature matches the signed request fields
    """
    try:
        expected = compute_signature(
            str(parameters["txtAmount"]),
            str(parameters["txtCurrency"]),
            str(parameters["txtIndex"]),
            str(parameters["txtMerchNum"]),
            str(parameters["txthttp"]),
            sha_key,
        )
    except KeyError:
        return False

    return signatures_match(expected, str(parameters.get("signature", "")))


def sign_callback(fields: Mapping[str, str], sha_key: str) -> str:
    """Signature the processor attaches to a callback."""
    return compute_signature(
        fields["txtMerchNum"],
        fields["txtIndex"],
        fields["txtAmount"],
        fields["txtCurrency"],
        fields["txtNumAut"],
        fields["RespVal"],
        fields["RespMsg"],
        sha_key,
    )


def build_callback(
    parameters: Mapping[str, Any],
    sha_key: str,
    result_value: str = "1",
    result_message: str = APPROVED_MESSAGE,
    authorization_number: Optional[str] = None,
) -> Dict[str, str]:
    """
    Build the signed callback for a redirect request.

    Args:
        parameters: Outbound request parameters
        sha_key: Shared secret
        result_value: RespVal ("1" approved, "0" declined, anything else unmapped)
        result_message: RespMsg
        authorization_number: txtNumAut, derived from txtIndex when omitted

    Returns:
        Form fields as NetCommerce posts them
    """
    order_reference = str(parameters["txtIndex"])
    if authorization_number is None:
        digest = hashlib.sha256(f"auth:{order_reference}".encode()).hexdigest()
        authorization_number = digest[:6].upper() if result_value == "1" else ""

    fields = {
        "txtMerchNum": str(parameters["txtMerchNum"]),
        "txtIndex": order_reference,
        "txtAmount": str(parameters["txtAmount"]),
        "txtCurrency": str(parameters["txtCurrency"]),
        "txtNumAut": authorization_number,
        "RespVal": result_value,
        "RespMsg": result_message,
    }
    fields["signature"] = sign_callback(fields, sha_key)
    return fields


def process_payment(parameters: Mapping[str, Any], sha_key: str) -> Dict[str, str]:
    """
    Simulate the buyer paying on the hosted page.

    Raises:
        ValueError: If the request signature is invalid
    """
    if not verify_request(parameters, sha_key):
        raise ValueError("Invalid request signature")

    email = str(parameters.get("email", "")).lower()
    if email in RESULT_EMAILS:
        result_value, result_message = RESULT_EMAILS[email]
        return build_callback(parameters, sha_key, result_value, result_message)

    # Deterministic approval/decline, ~90% approval
    hash_input = f"{parameters['txtIndex']}:{parameters['txtAmount']}:{parameters['txtCurrency']}"
    hash_value = int(hashlib.sha256(hash_input.encode()).hexdigest()[:8], 16)

    if hash_value % 10 != 0:
        return build_callback(parameters, sha_key)

    return build_callback(parameters, sha_key, "0", "Transaction declined")
