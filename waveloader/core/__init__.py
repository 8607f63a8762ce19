"""Core utilities: configuration and logging."""
