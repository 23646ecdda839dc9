"""
Pydantic Gateway Configuration Model

Immutable view of the merchant's NetCommerce settings. Built once from the
environment and passed explicitly into the request signer, the callback
verifier and the callback service.
"""
from enum import Enum
from typing import Literal
from pydantic import BaseModel, Field


# Fixed route the processor posts callbacks to
CALLBACK_ROUTE = "/wc-api/netcommerce"

ICON_OPTIONS = {
    "https://www.netcommercepay.com/logo/NCseal_L.gif": "NetCommerce Security Seal (Large)",
    "https://www.netcommercepay.com/logo/NCseal_M.gif": "NetCommerce Security Seal (Medium)",
    "https://www.netcommercepay.com/logo/NCseal_S.gif": "NetCommerce Security Seal (Small)",
}

LANGUAGE_OPTIONS = {
    "EN": "English",
    "AR": "Arabic",
}


class UnmappedResultPolicy(str, Enum):
    """What to do with a signed callback whose RespVal is neither "1" nor "0"."""
    IGNORE = "ignore"
    REJECT = "reject"
    ON_HOLD = "on_hold"


class GatewayConfig(BaseModel):
    """
    NetCommerce gateway settings.

    The shared secret is excluded from repr so the config can be logged.
    """

    enabled: bool = True
    title: str = "NetCommerce"
    description: str = ""
    icon: Literal[
        "https://www.netcommercepay.com/logo/NCseal_L.gif",
        "https://www.netcommercepay.com/logo/NCseal_M.gif",
        "https://www.netcommercepay.com/logo/NCseal_S.gif",
    ] = "https://www.netcommercepay.com/logo/NCseal_M.gif"
    merchant_number: str = Field(min_length=1)
    sha_key: str = Field(min_length=1, repr=False)
    request_url: str = Field(min_length=1)
    test_payment_mode: bool = True
    language: Literal["EN", "AR"] = "EN"
    unmapped_result_policy: UnmappedResultPolicy = UnmappedResultPolicy.IGNORE

    base_url: str = "http://localhost:8000"
    order_received_url_template: str = "{base_url}/checkout/order-received/{order_id}"
    order_pay_url_template: str = "{base_url}/checkout/order-pay/{order_id}"
    cancel_order_url_template: str = "{base_url}/cart/?cancel_order={order_id}"
    cart_url_template: str = "{base_url}/cart/"

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @property
    def payment_mode(self) -> str:
        return "test" if self.test_payment_mode else "real"

    def callback_url(self) -> str:
        """Return URL sent to NetCommerce as txthttp."""
        return f"{self.base_url}{CALLBACK_ROUTE}"

    def order_received_url(self, order_id: int) -> str:
        return self.order_received_url_template.format(base_url=self.base_url, order_id=order_id)

    def order_pay_url(self, order_id: int) -> str:
        return self.order_pay_url_template.format(base_url=self.base_url, order_id=order_id)

    def cancel_order_url(self, order_id: int) -> str:
        return self.cancel_order_url_template.format(base_url=self.base_url, order_id=order_id)

    def cart_url(self) -> str:
        return self.cart_url_template.format(base_url=self.base_url)

    def public_view(self) -> dict:
        """Buyer-facing description of the gateway. Never includes the secret."""
        return {
            "id": "netcommerce",
            "enabled": self.enabled,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "icon_label": ICON_OPTIONS[self.icon],
            "language": self.language,
            "language_label": LANGUAGE_OPTIONS[self.language],
            "payment_mode": self.payment_mode,
        }
