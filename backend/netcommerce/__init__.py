"""
NetCommerce hosted payment gateway.

Signs redirect requests to NetCommerce and verifies the callbacks it posts
back before any order changes state.
"""

__version__ = "0.1.0"
