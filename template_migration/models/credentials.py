"""Credential models for HubSpot and SFMC."""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class SourceCredentials:
    """HubSpot bearer token."""
    access_token: str
    from_store: bool = False


@dataclass
class DestinationCredentials:
    """SFMC installed-package parameters used to mint an access token."""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    subdomain: Optional[str] = None

    @classmethod
    def from_request(cls, data: Optional[Dict[str, Any]]) -> Optional["DestinationCredentials"]:
        """Build from a camelCase request payload."""
        if not data:
            return None
        return cls(
            client_id=data.get("clientId"),
            client_secret=data.get("clientSecret"),
            subdomain=data.get("subdomain"),
        )

    @property
    def is_complete(self) -> bool:
        """Check that every field needed for a token exchange is present."""
        return bool(self.client_id and self.client_secret and self.subdomain)


@dataclass
class DestinationSession:
    """An SFMC access token plus what is needed to address the REST API."""
    access_token: str
    subdomain: Optional[str] = None
    rest_instance_url: Optional[str] = None
    from_store: bool = False

    def rest_base_url(self, host_template: str) -> Optional[str]:
        """
        Get the REST base URL for this session.

        Args:
            host_template: Template with a ``{subdomain}`` placeholder

        Returns:
            Base URL without trailing slash, or None if it cannot be determined
        """
        if self.rest_instance_url:
            return self.rest_instance_url.rstrip("/")
        if self.subdomain:
            return host_template.format(subdomain=self.subdomain).rstrip("/")
        return None
