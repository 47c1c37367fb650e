"""Core infrastructure: logging, resource paths and translations."""
