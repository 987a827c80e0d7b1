"""Core infrastructure for configuration, logging and request context."""
