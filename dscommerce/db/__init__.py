"""Persistence layer: models, repositories and session management."""
