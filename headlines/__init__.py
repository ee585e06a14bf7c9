"""
Country headlines backend.

Visitors read and write one short headline per country and browse the
recent history of headlines for that country. Persistence is pluggable
(local JSON document, Redis REST endpoint, or a Redis server); the HTTP
layer lives in ``headlines.api``.
"""

__version__ = "1.0.0"
