"""
Citadel POW Server Package.

This package contains the web server implementation for Citadel POW.
It includes the API definition, configuration and request-scoped services.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration and constants.
    services: Dependencies and helpers shared by the route handlers.
    middleware: Request tracing middleware.
    exception_handlers: Error envelope rendering.
"""
