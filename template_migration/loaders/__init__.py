"""Loaders for destination content stores."""

from .base import BaseLoader
from .sfmc_loader import SFMCAuthClient, SFMCLoader, SFMCAPIError

__all__ = [
    "BaseLoader",
    "SFMCAuthClient",
    "SFMCLoader",
    "SFMCAPIError",
]
