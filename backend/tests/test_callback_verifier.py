import pytest

from netcommerce.exceptions import MissingCallbackFieldError, SignatureMismatchError
from netcommerce.mocks.hosted_processor import build_callback, process_payment
from netcommerce.models.transactions import CALLBACK_FIELDS, Accepted, RejectReason, Rejected, ResultCode
from netcommerce.services.callback_verifier import authenticate_callback, verify_callback
from netcommerce.services.request_signer import sign_request


SHA_KEY = "s3cr3t"


def test_known_callback_signature(make_callback) -> None:
    payload = make_callback()

    assert payload["signature"] == "5223dce62c952e21faf85e5157e5efcc416ec07e8b46745afa4ce7e44d7c8f6e"

    result = verify_callback(payload, SHA_KEY)

    assert isinstance(result, Accepted)
    assert result.order_id == 42
    assert result.order_reference == "42_1700000000000000000"
    assert result.result_code is ResultCode.APPROVED
    assert result.authorization_number == "A1B2C3"
    assert result.result_message == "Approved"


def test_round_trip_through_processor(order, gateway) -> None:
    parameters, _ = sign_request(order, gateway)
    payload = build_callback(parameters, gateway.sha_key)

    result = verify_callback(payload, gateway.sha_key)

    assert isinstance(result, Accepted)
    assert result.order_id == order.id
    assert result.order_reference == parameters["txtIndex"]
    assert len(result.authorization_number) == 6


@pytest.mark.parametrize(
    "result_value, expected",
    [
        ("1", ResultCode.APPROVED),
        ("0", ResultCode.DECLINED),
        ("7", ResultCode.OTHER),
        ("", ResultCode.OTHER),
        (" 1", ResultCode.OTHER),
        ("01", ResultCode.OTHER),
    ],
)
def test_result_code_mapping(make_callback, result_value, expected) -> None:
    result = verify_callback(make_callback(result_value=result_value), SHA_KEY)

    assert isinstance(result, Accepted)
    assert result.result_code is expected
    assert result.result_value == result_value


@pytest.mark.parametrize(
    "field, value",
    [
        ("txtMerchNum", "M2"),
        ("txtIndex", "43_1700000000000000000"),
        ("txtAmount", "0.01"),
        ("txtCurrency", "422"),
        ("txtNumAut", "FFFFFF"),
        ("RespVal", "0"),
        ("RespMsg", "Declined"),
    ],
)
def test_altering_any_signed_field_is_rejected(make_callback, field, value) -> None:
    payload = make_callback()
    payload[field] = value

    result = verify_callback(payload, SHA_KEY)

    assert isinstance(result, Rejected)
    assert result.reason is RejectReason.SIGNATURE_MISMATCH


def test_wrong_secret_is_rejected(make_callback) -> None:
    payload = make_callback(sha_key="another-secret")

    result = verify_callback(payload, SHA_KEY)

    assert isinstance(result, Rejected)
    assert result.reason is RejectReason.SIGNATURE_MISMATCH


def test_uppercase_signature_is_rejected(make_callback) -> None:
    payload = make_callback()
    payload["signature"] = payload["signature"].upper()

    assert verify_callback(payload, SHA_KEY).reason is RejectReason.SIGNATURE_MISMATCH


@pytest.mark.parametrize("field", CALLBACK_FIELDS)
def test_missing_field_is_rejected(make_callback, field) -> None:
    payload = make_callback()
    del payload[field]

    result = verify_callback(payload, SHA_KEY)

    assert isinstance(result, Rejected)
    assert result.reason is RejectReason.MISSING_FIELDS
    assert result.detail == {"missing": [field]}


def test_none_counts_as_missing(make_callback) -> None:
    payload = make_callback()
    payload["RespMsg"] = None

    with pytest.raises(MissingCallbackFieldError) as exc_info:
        authenticate_callback(payload, SHA_KEY)

    assert exc_info.value.missing == ["RespMsg"]


def test_all_missing_fields_are_listed() -> None:
    result = verify_callback({"txtIndex": "42_1"}, SHA_KEY)

    assert result.reason is RejectReason.MISSING_FIELDS
    assert result.detail["missing"] == [name for name in CALLBACK_FIELDS if name != "txtIndex"]


def test_empty_string_field_is_present(make_callback) -> None:
    payload = make_callback(result_value="0", result_message="Declined", authorization_number="")

    result = verify_callback(payload, SHA_KEY)

    assert isinstance(result, Accepted)
    assert result.result_code is ResultCode.DECLINED
    assert result.authorization_number == ""


def test_extra_fields_are_ignored(make_callback) -> None:
    payload = make_callback()
    payload["utm_source"] = "mail"

    assert isinstance(verify_callback(payload, SHA_KEY), Accepted)


@pytest.mark.parametrize(
    "order_reference",
    [
        "abc_1700000000000000000",
        "-1_1700000000000000000",
        "_1",
        "99999999999999999999_1",
    ],
)
def test_malformed_reference_with_valid_signature(make_callback, order_reference) -> None:
    result = verify_callback(make_callback(order_reference=order_reference), SHA_KEY)

    assert isinstance(result, Rejected)
    assert result.reason is RejectReason.MALFORMED_ORDER_REFERENCE
    assert result.detail == {"order_reference": order_reference}


def test_signature_is_checked_before_reference(make_callback) -> None:
    payload = make_callback(order_reference="abc_1")
    payload["signature"] = "0" * 64

    assert verify_callback(payload, SHA_KEY).reason is RejectReason.SIGNATURE_MISMATCH


def test_authenticate_raises_on_mismatch(make_callback) -> None:
    payload = make_callback()
    payload["txtAmount"] = "0.01"

    with pytest.raises(SignatureMismatchError) as exc_info:
        authenticate_callback(payload, SHA_KEY)

    assert exc_info.value.error_code == "netcommerce:callback:signature_mismatch"
    assert SHA_KEY not in str(exc_info.value.to_dict())


def test_processor_refuses_tampered_request(order, gateway) -> None:
    parameters, _ = sign_request(order, gateway)
    parameters["txtAmount"] = "0.01"

    with pytest.raises(ValueError):
        process_payment(parameters, gateway.sha_key)


def test_processor_decline_email(gateway, billing, order) -> None:
    declined = order.model_copy(update={"billing": billing.model_copy(update={"email": "decline@example.com"})})
    parameters, _ = sign_request(declined, gateway)

    payload = process_payment(parameters, gateway.sha_key)
    result = verify_callback(payload, gateway.sha_key)

    assert isinstance(result, Accepted)
    assert result.result_code is ResultCode.DECLINED
    assert result.authorization_number == ""
