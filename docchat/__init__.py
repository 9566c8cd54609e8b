"""Document chat assistant API with inline citation reconciliation."""

__version__ = "0.1.0"
