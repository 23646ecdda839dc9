#!/usr/bin/env python3
"""
Manual script that plays NetCommerce against a running server.

Fetches the receipt page of an order, checks the signed form the way the
processor would, then posts a signed callback and prints where the buyer
gets redirected.

Usage:
    python simulate_callback.py 42 approve
    python simulate_callback.py 42 decline
    python simulate_callback.py 42 tamper
"""
import re
import sys

import requests

from netcommerce.config import settings
from netcommerce.mocks.hosted_processor import build_callback, verify_request

HIDDEN_INPUT = re.compile(r"<input type=\"hidden\" name=\"([^\"]+)\" value=\"([^\"]*)\" />")

RESULTS = {
    "approve": ("1", "Transaction approved"),
    "decline": ("0", "Transaction declined"),
    "unknown": ("7", "Transaction pending review"),
}


def simulate(order_id: int, action: str):
    """Run one buyer round trip through the processor."""

    base_url = f"http://localhost:{settings.port}"
    sha_key = settings.netcommerce_sha_key

    print(f"📨 Fetching receipt page for order {order_id}")
    print("=" * 70)

    try:
        response = requests.get(f"{base_url}/checkout/order-pay/{order_id}", timeout=10)

        if response.status_code != 200:
            print(f"❌ Error: HTTP {response.status_code}")
            print(response.text)
            return

        parameters = dict(HIDDEN_INPUT.findall(response.text))
        print(f"   txtIndex: {parameters.get('txtIndex')}")
        print(f"   txtAmount: {parameters.get('txtAmount')} ({parameters.get('txtCurrency')})")

        if not verify_request(parameters, sha_key):
            print("❌ Processor would refuse this request: bad signature")
            return
        print("   ✅ Request signature valid")

        result_value, result_message = RESULTS.get(action, RESULTS["approve"])
        callback = build_callback(parameters, sha_key, result_value, result_message)

        if action == "tamper":
            callback["txtAmount"] = "0.01"

        response = requests.post(
            f"{base_url}/wc-api/netcommerce",
            data=callback,
            allow_redirects=False,
            timeout=10,
        )

        print(f"\n📡 Callback ({action}) -> HTTP {response.status_code}")
        print(f"   Redirect: {response.headers.get('location')}")

        order = requests.get(f"{base_url}/api/orders/{order_id}", timeout=10).json()
        print(f"   Order status: {order.get('status')}")
        print(f"   Payment reference: {order.get('payment_reference')}")

    except requests.exceptions.Timeout:
        print("❌ Timeout - server took too long to respond")
    except requests.exceptions.ConnectionError:
        print("❌ Connection error - is the server running?")


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python simulate_callback.py <order_id> approve|decline|unknown|tamper")
        print("\nExample:")
        print("  python simulate_callback.py 42 approve")
        sys.exit(1)

    simulate(int(sys.argv[1]), sys.argv[2])
