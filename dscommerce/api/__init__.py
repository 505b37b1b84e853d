"""DSCommerce REST API."""
