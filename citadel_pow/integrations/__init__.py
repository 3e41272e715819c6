"""Outbound HTTP integrations (Blink Lightning wallet, Discord)."""
