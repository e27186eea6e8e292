"""Tests for credential stores and resolution.

Tests cover:
- Inline values bypass the store
- Missing and unreadable stored credentials
- Destination addressing from stored records
- Supabase row mapping
"""

from unittest.mock import MagicMock

import pytest

from template_migration.config import Settings
from template_migration.errors import AuthError, CredentialLookupError, NotConnectedError
from template_migration.models.credentials import DestinationCredentials, DestinationSession
from template_migration.services.credentials import (
    CredentialResolver,
    CredentialStore,
    InMemoryCredentialStore,
    SupabaseCredentialStore,
    create_credential_store,
)


@pytest.fixture
def auth_client():
    client = MagicMock()
    client.get_token.return_value = DestinationSession("minted", subdomain="mc123")
    return client


@pytest.fixture
def mock_store():
    return MagicMock(spec=CredentialStore)


# =============================================================================
# Source credentials
# =============================================================================


class TestResolveSource:

    def test_inline_token_wins(self, mock_store, auth_client):
        credentials = CredentialResolver(mock_store, auth_client).resolve_source("user-1", "inline-token")

        assert credentials.access_token == "inline-token"
        assert credentials.from_store is False
        mock_store.get.assert_not_called()

    def test_stored_token(self, store, auth_client):
        credentials = CredentialResolver(store, auth_client).resolve_source("user-1")

        assert credentials.access_token == "hs-token"
        assert credentials.from_store is True

    def test_not_connected(self, auth_client):
        with pytest.raises(NotConnectedError) as exc_info:
            CredentialResolver(InMemoryCredentialStore(), auth_client).resolve_source("user-1")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Missing HubSpot token. Please reconnect to HubSpot."

    def test_store_failure(self, mock_store, auth_client):
        mock_store.get.side_effect = RuntimeError("connection refused")

        with pytest.raises(CredentialLookupError) as exc_info:
            CredentialResolver(mock_store, auth_client).resolve_source("user-1")

        assert exc_info.value.status_code == 500
        assert exc_info.value.message == "Database error retrieving HubSpot tokens."
        assert exc_info.value.details == "connection refused"


# =============================================================================
# Destination credentials
# =============================================================================


class TestResolveDestination:

    def test_complete_inline_credentials_are_exchanged(self, mock_store, auth_client):
        inline = DestinationCredentials("cid", "secret", "mc123")

        session = CredentialResolver(mock_store, auth_client).resolve_destination("user-1", inline)

        assert session.access_token == "minted"
        auth_client.get_token.assert_called_once_with(inline)
        mock_store.get.assert_not_called()

    def test_partial_inline_credentials_use_store(self, auth_client):
        store = InMemoryCredentialStore({("user-1", "sfmc"): {"accessToken": "stored"}})
        inline = DestinationCredentials(subdomain="mc9")

        session = CredentialResolver(store, auth_client).resolve_destination("user-1", inline)

        assert session.access_token == "stored"
        assert session.subdomain == "mc9"
        assert session.from_store is True
        auth_client.get_token.assert_not_called()

    def test_stored_record(self, store, auth_client):
        session = CredentialResolver(store, auth_client).resolve_destination("user-1")

        assert session.access_token == "sfmc-token"
        assert session.subdomain == "mc123"

    def test_stored_rest_instance_url(self, auth_client):
        store = InMemoryCredentialStore({
            ("user-1", "sfmc"): {"accessToken": "t", "restInstanceUrl": "https://x.rest.example.com/"},
        })

        session = CredentialResolver(store, auth_client).resolve_destination("user-1")

        assert session.rest_base_url("https://{subdomain}.example.com") == "https://x.rest.example.com"

    def test_stored_record_without_addressing(self, auth_client):
        store = InMemoryCredentialStore({("user-1", "sfmc"): {"accessToken": "t"}})

        with pytest.raises(AuthError):
            CredentialResolver(store, auth_client).resolve_destination("user-1")

    def test_not_connected(self, auth_client):
        with pytest.raises(NotConnectedError) as exc_info:
            CredentialResolver(InMemoryCredentialStore(), auth_client).resolve_destination("user-1")

        assert exc_info.value.message == "Missing SFMC credentials. Please connect SFMC."

    def test_store_failure(self, mock_store, auth_client):
        mock_store.get.side_effect = RuntimeError("timeout")

        with pytest.raises(AuthError) as exc_info:
            CredentialResolver(mock_store, auth_client).resolve_destination("user-1")

        assert not isinstance(exc_info.value, CredentialLookupError)
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "No SFMC credentials provided or found in database."
        assert exc_info.value.details == "timeout"


# =============================================================================
# Stores
# =============================================================================


class TestStores:

    def test_in_memory_returns_copies(self):
        store = InMemoryCredentialStore()
        store.put("u", "hubspot", {"accessToken": "a"})

        record = store.get("u", "hubspot")
        record["accessToken"] = "changed"

        assert store.get("u", "hubspot") == {"accessToken": "a"}
        assert store.get("u", "sfmc") is None

    def test_supabase_row_mapping(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value.eq.return_value.eq.return_value.limit.return_value
        query.execute.return_value.data = [{
            "user_id": "u",
            "provider": "sfmc",
            "access_token": "t",
            "subdomain": "mc1",
        }]

        record = SupabaseCredentialStore("https://x.supabase.co", "key", client=client).get("u", "sfmc")

        assert record["accessToken"] == "t"
        assert record["subdomain"] == "mc1"
        assert record["restInstanceUrl"] is None
        client.table.assert_called_once_with("integration_tokens")

    def test_supabase_no_rows(self):
        client = MagicMock()
        query = client.table.return_value.select.return_value.eq.return_value.eq.return_value.limit.return_value
        query.execute.return_value.data = []

        assert SupabaseCredentialStore("https://x.supabase.co", "key", client=client).get("u", "hubspot") is None

    def test_store_selection(self):
        assert isinstance(create_credential_store(Settings()), InMemoryCredentialStore)

        store = create_credential_store(
            Settings(supabase_url="https://x.supabase.co", supabase_service_role_key="key")
        )
        assert isinstance(store, SupabaseCredentialStore)
        assert store.table == "integration_tokens"
