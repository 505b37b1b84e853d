"""Shared API building blocks: authentication and error helpers."""
