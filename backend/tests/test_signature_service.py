from decimal import Decimal

import pytest

from netcommerce.exceptions import MalformedOrderReferenceError, UnsupportedCurrencyError
from netcommerce.services.signature_service import (
    compute_signature,
    currency_code_for,
    format_amount,
    generate_order_reference,
    parse_order_reference,
    signatures_match,
)


def test_compute_signature_is_sha256_of_concatenation() -> None:
    assert compute_signature("a", "b", "c") == (
        "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )


def test_compute_signature_has_no_separators() -> None:
    assert compute_signature("150000", "422") == compute_signature("150000422")
    assert compute_signature("150000", "422") == (
        "8f4d7856259f3180f9bfe920f5ae3158bb5ba09f92a24a733ddf6447d6b3a19c"
    )


def test_signatures_match() -> None:
    digest = compute_signature("abc")
    assert signatures_match(digest, digest)
    assert not signatures_match(digest, digest.upper())
    assert not signatures_match(digest, digest[:-1])
    assert not signatures_match(digest, "")


@pytest.mark.parametrize(
    "amount, currency, expected",
    [
        (Decimal("19.99"), "USD", "19.99"),
        (20, "USD", "20.00"),
        ("19.995", "USD", "20.00"),
        (Decimal("1234567.5"), "USD", "1234567.50"),
        (150000, "LBP", "150000"),
        (Decimal("150000.50"), "LBP", "150001"),
        (Decimal("1500000"), "LBP", "1500000"),
        (Decimal("0"), "USD", "0.00"),
    ],
)
def test_format_amount(amount, currency, expected) -> None:
    assert format_amount(amount, currency) == expected


def test_currency_codes() -> None:
    assert currency_code_for("USD") == "840"
    assert currency_code_for("LBP") == "422"
    assert currency_code_for("usd") == "840"


@pytest.mark.parametrize("currency", ["EUR", "", "GBP"])
def test_unsupported_currency_is_an_error(currency) -> None:
    with pytest.raises(UnsupportedCurrencyError) as exc_info:
        currency_code_for(currency)

    assert exc_info.value.error_code == "netcommerce:request:unsupported_currency"
    assert exc_info.value.details == {"currency": currency}

    with pytest.raises(UnsupportedCurrencyError):
        format_amount(Decimal("10"), currency)


def test_generated_references_are_unique_and_increasing() -> None:
    references = [generate_order_reference(42) for _ in range(1000)]

    assert len(set(references)) == 1000
    tokens = [int(ref.split("_", 1)[1]) for ref in references]
    assert tokens == sorted(tokens)
    assert all(ref.startswith("42_") for ref in references)


@pytest.mark.parametrize("order_id", [0, 42, 1234567])
def test_generated_reference_parses_back(order_id) -> None:
    assert parse_order_reference(generate_order_reference(order_id)) == order_id


@pytest.mark.parametrize(
    "reference, expected",
    [
        ("42_1700000000000000000", 42),
        ("42_17_00", 42),
        ("42", 42),
        ("0_1", 0),
        ("007_1", 7),
        ("9223372036854775807_1", 2**63 - 1),
        ("00000000000000000000042_1", 42),
    ],
)
def test_parse_order_reference(reference, expected) -> None:
    assert parse_order_reference(reference) == expected


@pytest.mark.parametrize(
    "reference",
    [
        "abc_1",
        "-1_2",
        "",
        "_123",
        "4 2_1",
        "４２_1",
        "+42_1",
        "9223372036854775808_1",
        "99999999999999999999_1",
        "9" * 5000 + "_1",
    ],
)
def test_parse_malformed_order_reference(reference) -> None:
    with pytest.raises(MalformedOrderReferenceError) as exc_info:
        parse_order_reference(reference)

    assert exc_info.value.details == {"order_reference": reference}
