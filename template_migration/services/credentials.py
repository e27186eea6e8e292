"""Credential stores and the resolver that picks inline or stored credentials."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Tuple, Type

from supabase import Client, create_client

from ..config import Settings
from ..errors import AuthError, CredentialLookupError, MigrationError, NotConnectedError
from ..loaders.sfmc_loader import SFMCAuthClient
from ..models.credentials import (
    DestinationCredentials,
    DestinationSession,
    SourceCredentials,
)

logger = logging.getLogger(__name__)

HUBSPOT_PROVIDER = "hubspot"
SFMC_PROVIDER = "sfmc"


class CredentialStore(ABC):
    """Per-user integration tokens keyed by provider name."""

    @abstractmethod
    def get(self, user_id: str, provider: str) -> Optional[Dict[str, Any]]:
        """
        Look up stored credentials.

        Returns:
            Record with at least ``accessToken``, or None when the user
            has not connected the provider
        """
        pass


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed store for local runs and tests."""

    def __init__(self, records: Optional[Dict[Tuple[str, str], Dict[str, Any]]] = None):
        self._records: Dict[Tuple[str, str], Dict[str, Any]] = dict(records or {})

    def put(self, user_id: str, provider: str, record: Dict[str, Any]) -> None:
        self._records[(user_id, provider)] = dict(record)

    def get(self, user_id: str, provider: str) -> Optional[Dict[str, Any]]:
        record = self._records.get((user_id, provider))
        return dict(record) if record is not None else None


class SupabaseCredentialStore(CredentialStore):
    """Reads tokens from a Supabase table."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        table: str = "integration_tokens",
        client: Optional[Client] = None
    ):
        self.url = url
        self.service_role_key = service_role_key
        self.table = table
        self._client = client

    @property
    def client(self) -> Client:
        """Get or create the Supabase client."""
        if self._client is None:
            self._client = create_client(self.url, self.service_role_key)
        return self._client

    def get(self, user_id: str, provider: str) -> Optional[Dict[str, Any]]:
        result = (
            self.client.table(self.table)
            .select("*")
            .eq("user_id", user_id)
            .eq("provider", provider)
            .limit(1)
            .execute()
        )
        rows = result.data or []
        if not rows:
            return None

        row = rows[0]
        return {
            "accessToken": row.get("access_token"),
            "refreshToken": row.get("refresh_token"),
            "subdomain": row.get("subdomain"),
            "restInstanceUrl": row.get("rest_instance_url"),
        }


def create_credential_store(settings: Settings) -> CredentialStore:
    """Pick the credential store for the configured environment."""
    if settings.use_supabase:
        logger.info("Using Supabase credential store")
        return SupabaseCredentialStore(
            url=settings.supabase_url,
            service_role_key=settings.supabase_service_role_key,
            table=settings.supabase_tokens_table,
        )

    logger.warning("Supabase is not configured; using in-memory credential store")
    return InMemoryCredentialStore()


class CredentialResolver:
    """
    Decides once per run where each system's credentials come from.

    Inline values supplied by the caller always win and the store is
    never consulted for them.
    """

    def __init__(self, store: CredentialStore, auth_client: SFMCAuthClient):
        self.store = store
        self.auth_client = auth_client

    def _lookup(
        self,
        user_id: str,
        provider: str,
        failure_message: str,
        error_class: Type[MigrationError] = CredentialLookupError
    ) -> Optional[Dict[str, Any]]:
        try:
            return self.store.get(user_id, provider)
        except Exception as e:
            logger.error(f"Error retrieving {provider} tokens for user {user_id}: {e}")
            raise error_class(failure_message, details=str(e)) from e

    def resolve_source(self, user_id: str, inline_token: Optional[str] = None) -> SourceCredentials:
        """Get the HubSpot access token."""
        if inline_token:
            logger.info("Using hubspotToken from request")
            return SourceCredentials(access_token=inline_token)

        record = self._lookup(user_id, HUBSPOT_PROVIDER, "Database error retrieving HubSpot tokens.")
        if not record or not record.get("accessToken"):
            raise NotConnectedError("Missing HubSpot token. Please reconnect to HubSpot.")

        return SourceCredentials(access_token=record["accessToken"], from_store=True)

    def resolve_destination(
        self,
        user_id: str,
        inline: Optional[DestinationCredentials] = None
    ) -> DestinationSession:
        """Get an SFMC session from inline credentials or the store."""
        if inline is not None and inline.is_complete:
            logger.info("Using direct SFMC credentials from request")
            return self.auth_client.get_token(inline)

        # SFMC store failures are reported as missing credentials (400)
        record = self._lookup(
            user_id,
            SFMC_PROVIDER,
            "No SFMC credentials provided or found in database.",
            error_class=AuthError,
        )
        if not record or not record.get("accessToken"):
            raise NotConnectedError("Missing SFMC credentials. Please connect SFMC.")

        session = DestinationSession(
            access_token=record["accessToken"],
            subdomain=record.get("subdomain") or (inline.subdomain if inline else None),
            rest_instance_url=record.get("restInstanceUrl"),
            from_store=True,
        )
        if not session.subdomain and not session.rest_instance_url:
            raise AuthError("SFMC credentials are missing the subdomain. Please reconnect SFMC.")

        return session
