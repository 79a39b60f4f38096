"""
Slate Agent Configuration Package.

Provides Pydantic Settings loaded from environment variables.
"""

from slate_config.settings import Settings

__all__ = ["Settings"]
