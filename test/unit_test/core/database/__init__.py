"""Unit tests for the database layer in citadel_pow/core/database.

Repository tests run against an in-memory SQLite database created from
the ORM metadata, so they need no external database service.
"""
