"""
Redirect Form Rendering

Renders the auto-submitting form that posts the signed parameters to
NetCommerce, and the generic page shown when a request cannot be signed.
"""
from pathlib import Path
from typing import Dict

from jinja2 import Environment, FileSystemLoader, select_autoescape

from ..models.gateway import GatewayConfig

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

templates = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


def render_redirect_form(parameters: Dict[str, str], gateway: GatewayConfig, order_id: int) -> str:
    """
    Build the redirect form for a receipt page.

    Args:
        parameters: Signed, non-empty parameters from sign_request
        gateway: Gateway configuration (request URL)
        order_id: Order the cancel link restores the cart for

    Returns:
        HTML fragment; values are escaped
    """
    return templates.get_template("redirect_form.html").render(
        request_url=gateway.request_url,
        parameters=parameters,
        cancel_url=gateway.cancel_order_url(order_id),
    )


def render_payment_unavailable(gateway: GatewayConfig) -> str:
    """Generic message for a checkout that cannot be sent to NetCommerce."""
    return templates.get_template("payment_unavailable.html").render(
        title=gateway.title,
        cart_url=gateway.cart_url(),
    )
