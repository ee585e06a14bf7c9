"""
FastAPI layer for the headlines backend.

Schemas (Pydantic DTOs), services, routes, dependency providers and
error handling. ``headlines.api.app.create_app`` assembles them.
"""
