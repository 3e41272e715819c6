"""API I/O models, kept separate from the database entities."""
