"""Costeo AI configuration.

This package contains:
- settings: Environment variables and configuration
- secrets: Secret access (environment / .env)
- errors: Custom exceptions and error codes
"""

from config.settings import settings
from config.errors import CosteoError
from config.secrets import get_secret, get_openai_api_key

__all__ = [
    "settings",
    "CosteoError",
    "get_secret",
    "get_openai_api_key",
]
