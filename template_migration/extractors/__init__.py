"""Template extractors for source services."""

from .base import BaseExtractor, EndpointStrategy, FetchAttempt
from .hubspot_extractor import HubSpotTemplateExtractor

__all__ = [
    "BaseExtractor",
    "EndpointStrategy",
    "FetchAttempt",
    "HubSpotTemplateExtractor",
]
