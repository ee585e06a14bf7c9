"""ASGI middleware configuration."""
