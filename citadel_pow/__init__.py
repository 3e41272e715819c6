"""Citadel POW.

Backend API for the Citadel POW study and donation tracker.

High-level architecture
-----------------------

- ``core``: configuration-independent building blocks: logging, monitoring,
  domain errors, the SQLModel database layer and the API I/O schemas.
- ``integrations``: outbound clients for Discord and the Blink Lightning wallet.
- ``server``: the FastAPI application, its routers and request-scoped services.
"""

__version__ = "1.0.0"
