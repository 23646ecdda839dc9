"""
NetCommerce Gateway Configuration Module

Loads environment variables for the gateway service.

Gateway settings are read once at startup and handed to the signer and the
callback verifier as an immutable GatewayConfig, never read from the
process-wide settings object inside the protocol code.
"""
from pydantic_settings import BaseSettings
from typing import Literal

from .models.gateway import GatewayConfig, UnmappedResultPolicy


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Notes:
    - The shared secret (sha_key) is environment-based and never logged
    - URL templates point at pages owned by the checkout host
    """

    # NetCommerce Gateway
    netcommerce_enabled: bool = True
    netcommerce_title: str = "NetCommerce"
    netcommerce_description: str = (
        "Secure online payment services with real time credit card transaction validation."
    )
    netcommerce_icon: str = "https://www.netcommercepay.com/logo/NCseal_M.gif"
    netcommerce_merchant_number: str = "merchant_demo_only_change_me"
    netcommerce_sha_key: str = "sha_key_demo_only_change_me"
    netcommerce_request_url: str = "https://www.netcommercepay.com/iPAY/"
    netcommerce_test_payment_mode: bool = True
    netcommerce_language: Literal["EN", "AR"] = "EN"
    netcommerce_unmapped_result_policy: UnmappedResultPolicy = UnmappedResultPolicy.IGNORE

    # Checkout host URLs
    public_base_url: str = "http://localhost:8000"
    order_received_url_template: str = "{base_url}/checkout/order-received/{order_id}"
    order_pay_url_template: str = "{base_url}/checkout/order-pay/{order_id}"
    cancel_order_url_template: str = "{base_url}/cart/?cancel_order={order_id}"
    cart_url_template: str = "{base_url}/cart/"

    # Logging
    demo_mode: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Database
    database_path: str = "./netcommerce.db"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False

    def gateway_config(self) -> GatewayConfig:
        """Build the immutable gateway configuration passed into the protocol code."""
        return GatewayConfig(
            enabled=self.netcommerce_enabled,
            title=self.netcommerce_title,
            description=self.netcommerce_description,
            icon=self.netcommerce_icon,
            merchant_number=self.netcommerce_merchant_number,
            sha_key=self.netcommerce_sha_key,
            request_url=self.netcommerce_request_url,
            test_payment_mode=self.netcommerce_test_payment_mode,
            language=self.netcommerce_language,
            unmapped_result_policy=self.netcommerce_unmapped_result_policy,
            base_url=self.public_base_url.rstrip("/"),
            order_received_url_template=self.order_received_url_template,
            order_pay_url_template=self.order_pay_url_template,
            cancel_order_url_template=self.cancel_order_url_template,
            cart_url_template=self.cart_url_template,
        )


# Global settings instance
settings = Settings()
