"""
Pydantic Transaction Models

Outbound redirect request, inbound callback payload and the verification
result handed from the callback verifier to the callback service.
"""
from enum import Enum
from typing import Optional, Literal, Union, Dict
from pydantic import BaseModel, Field


class ResultCode(str, Enum):
    """NetCommerce RespVal, mapped from exact string values."""
    APPROVED = "approved"
    DECLINED = "declined"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str) -> "ResultCode":
        if raw == "1":
            return cls.APPROVED
        if raw == "0":
            return cls.DECLINED
        return cls.OTHER


class RejectReason(str, Enum):
    MISSING_FIELDS = "missing_fields"
    SIGNATURE_MISMATCH = "signature_mismatch"
    MALFORMED_ORDER_REFERENCE = "malformed_order_reference"
    ORDER_NOT_FOUND = "order_not_found"
    UNMAPPED_RESULT = "unmapped_result"


class TransactionRequest(BaseModel):
    """
    Signed fields sent to NetCommerce.

    Field names match the wire names through aliases.
    """
    order_reference: str = Field(alias="txtIndex")
    amount: str = Field(alias="txtAmount")
    currency_code: str = Field(alias="txtCurrency")
    merchant_number: str = Field(alias="txtMerchNum")
    callback_url: str = Field(alias="txthttp")
    signature: str = Field(pattern="^[0-9a-f]{64}$")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }


class CallbackPayload(BaseModel):
    """
    The eight fields NetCommerce posts back. All are required.

    Values are kept as the raw strings received; they are signature input.
    """
    merchant_number: str = Field(alias="txtMerchNum")
    order_reference: str = Field(alias="txtIndex")
    amount: str = Field(alias="txtAmount")
    currency_code: str = Field(alias="txtCurrency")
    authorization_number: str = Field(alias="txtNumAut")
    result_value: str = Field(alias="RespVal")
    result_message: str = Field(alias="RespMsg")
    signature: str = Field(alias="signature")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @property
    def result_code(self) -> ResultCode:
        return ResultCode.from_raw(self.result_value)


# Wire names of the callback fields, in payload declaration order
CALLBACK_FIELDS = tuple(f.alias for f in CallbackPayload.model_fields.values())


class Accepted(BaseModel):
    """Callback signature matched."""
    outcome: Literal["accepted"] = "accepted"
    order_id: int = Field(ge=0)
    order_reference: str
    result_code: ResultCode
    result_value: str
    result_message: str
    authorization_number: str

    model_config = {"frozen": True}


class Rejected(BaseModel):
    """Callback must not change any order state."""
    outcome: Literal["rejected"] = "rejected"
    reason: RejectReason
    detail: Dict[str, object] = Field(default_factory=dict)
    order_id: Optional[int] = None

    model_config = {"frozen": True}


VerificationResult = Union[Accepted, Rejected]
