"""Server-wide constants."""

PROJECT_NAME = "Citadel POW API"
API_PREFIX = "/api"
API_SCHEMA_VERSION = "v1"
