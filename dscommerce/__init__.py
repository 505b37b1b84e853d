"""DSCommerce - order and catalog backend for an online shop.

Exposes a REST API for browsing the product catalog, placing orders and
reading them back, secured with OAuth2 password-grant bearer tokens.
"""

__version__ = "0.1.0"
