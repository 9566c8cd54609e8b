"""Core utilities: logging, errors, security, decorators."""
