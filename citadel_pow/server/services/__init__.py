"""Request-scoped dependencies and helpers shared by the API routers."""
