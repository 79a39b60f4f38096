"""Tool adapters for external services."""
