"""Core building blocks shared by the server and integrations."""
