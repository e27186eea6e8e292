"""Tests for the SFMC token exchange and Content Builder loader.

Tests cover:
- Client credentials token exchange
- Category listing with pagination
- Category and template asset creation
- Error mapping for rejected calls
"""

from unittest.mock import MagicMock

import pytest
import requests

from template_migration.errors import AssetCreationError, AuthError
from template_migration.loaders.sfmc_loader import (
    SFMCAPIError,
    SFMCAuthClient,
    SFMCLoader,
    TEMPLATE_ASSET_TYPE,
)
from template_migration.models.credentials import DestinationCredentials, DestinationSession


@pytest.fixture
def session():
    return MagicMock()


@pytest.fixture
def credentials():
    return DestinationCredentials(client_id="cid", client_secret="secret", subdomain="mc123")


@pytest.fixture
def loader(session):
    return SFMCLoader(DestinationSession("sfmc-token", subdomain="mc123"), session=session)


# =============================================================================
# Token exchange
# =============================================================================


class TestSFMCAuthClient:

    def test_exchanges_client_credentials(self, session, credentials, make_response):
        session.post.return_value = make_response(200, {
            "access_token": "abc",
            "rest_instance_url": "https://mc123.rest.marketingcloudapis.com/",
        })

        result = SFMCAuthClient(session=session).get_token(credentials)

        assert result.access_token == "abc"
        assert result.subdomain == "mc123"
        assert result.rest_instance_url == "https://mc123.rest.marketingcloudapis.com/"
        session.post.assert_called_once_with(
            "https://mc123.auth.marketingcloudapis.com/v2/token",
            json={"grant_type": "client_credentials", "client_id": "cid", "client_secret": "secret"},
            timeout=30.0,
        )

    def test_rejected_credentials(self, session, credentials, make_response):
        session.post.return_value = make_response(401, {
            "error": "invalid_client",
            "error_description": "Client authentication failed.",
        })

        with pytest.raises(AuthError) as exc_info:
            SFMCAuthClient(session=session).get_token(credentials)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "Failed to authenticate with SFMC using provided credentials."
        assert exc_info.value.details == "Client authentication failed."

    def test_transport_failure(self, session, credentials):
        session.post.side_effect = requests.exceptions.Timeout("timed out")

        with pytest.raises(AuthError):
            SFMCAuthClient(session=session).get_token(credentials)

    def test_missing_access_token(self, session, credentials, make_response):
        session.post.return_value = make_response(200, {"token_type": "Bearer"})

        with pytest.raises(AuthError) as exc_info:
            SFMCAuthClient(session=session).get_token(credentials)

        assert "access_token" in exc_info.value.details

    def test_incomplete_credentials_never_call(self, session):
        with pytest.raises(AuthError):
            SFMCAuthClient(session=session).get_token(DestinationCredentials(client_id="cid"))

        session.post.assert_not_called()


# =============================================================================
# Loader
# =============================================================================


class TestSFMCLoader:

    def test_rest_instance_url_preferred(self, session):
        loader = SFMCLoader(
            DestinationSession("t", subdomain="mc123", rest_instance_url="https://custom.rest.example.com/"),
            session=session,
        )

        assert loader.base_url == "https://custom.rest.example.com"

    def test_missing_subdomain(self, session):
        with pytest.raises(AuthError):
            SFMCLoader(DestinationSession("t"), session=session)

    def test_list_folders_paginates(self, session, make_response):
        loader = SFMCLoader(DestinationSession("t", subdomain="mc123"), page_size=2, session=session)
        session.request.side_effect = [
            make_response(200, {"count": 3, "items": [
                {"id": 1, "name": "Content Builder", "parentId": 0},
                {"id": 5, "name": "Newsletters", "parentId": 1},
            ]}),
            make_response(200, {"count": 3, "items": [
                {"id": 7, "name": "HubSpot Templates", "parentId": 1},
            ]}),
        ]

        folders = loader.list_folders()

        assert [(f.id, f.name, f.parent_id) for f in folders] == [
            ("1", "Content Builder", "0"),
            ("5", "Newsletters", "1"),
            ("7", "HubSpot Templates", "1"),
        ]
        first, second = session.request.call_args_list
        assert first.args == ("GET", "https://mc123.rest.marketingcloudapis.com/asset/v1/content/categories")
        assert first.kwargs["headers"]["Authorization"] == "Bearer t"
        assert second.kwargs["params"] == {"$page": 2, "$pagesize": 2}

    def test_list_folders_error(self, loader, session, make_response):
        session.request.return_value = make_response(401, {"message": "Not Authorized"})

        with pytest.raises(SFMCAPIError) as exc_info:
            loader.list_folders()

        assert exc_info.value.status_code == 401
        assert exc_info.value.message == "Not Authorized"

    def test_category_without_id(self, loader, session, make_response):
        session.request.return_value = make_response(200, {"count": 1, "items": [{"name": "Content Builder"}]})

        with pytest.raises(SFMCAPIError):
            loader.list_folders()

    def test_non_numeric_count(self, session, make_response):
        loader = SFMCLoader(DestinationSession("t", subdomain="mc123"), page_size=1, session=session)
        session.request.return_value = make_response(200, {"count": "many", "items": [{"id": 1, "name": "Content Builder"}]})

        with pytest.raises(SFMCAPIError) as exc_info:
            loader.list_folders()

        assert exc_info.value.details == "many"

    def test_create_folder(self, loader, session, make_response):
        session.request.return_value = make_response(201, {"id": 88, "name": "HubSpot Templates", "parentId": 1})

        folder = loader.create_folder("HubSpot Templates", "1")

        assert folder.id == "88"
        assert folder.parent_id == "1"
        assert session.request.call_args.kwargs["json"] == {"name": "HubSpot Templates", "parentId": 1}

    def test_create_template(self, loader, session, make_response):
        session.request.return_value = make_response(201, {"id": 4242, "customerKey": "ck-1"})
        slots = {"main": {"content": "<p>x</p>", "design": "d"}}

        asset = loader.create_template(
            "Promo",
            '<div data-type="slot" data-key="main"></div>',
            "77",
            {"channels": {"email": True, "web": False}, "slots": slots},
        )

        assert asset.id == "4242"
        assert asset.customer_key == "ck-1"
        assert loader.created_ids == ["4242"]
        method, url = session.request.call_args.args
        assert method == "POST"
        assert url == "https://mc123.rest.marketingcloudapis.com/asset/v1/content/assets"
        assert session.request.call_args.kwargs["json"] == {
            "name": "Promo",
            "content": '<div data-type="slot" data-key="main"></div>',
            "assetType": TEMPLATE_ASSET_TYPE,
            "category": {"id": 77},
            "channels": {"email": True, "web": False},
            "slots": slots,
        }

    def test_create_template_rejected(self, loader, session, make_response):
        session.request.return_value = make_response(400, {
            "message": "Asset names within a category and asset type must be unique.",
        })

        with pytest.raises(AssetCreationError) as exc_info:
            loader.create_template("Promo", "<p>x</p>", "77")

        assert str(exc_info.value) == "Asset names within a category and asset type must be unique."
        assert exc_info.value.status_code == 400
        assert loader.created_ids == []

    def test_validation_errors_message(self, loader, session, make_response):
        session.request.return_value = make_response(400, {
            "validationErrors": [{"message": "Content is required"}],
        })

        with pytest.raises(AssetCreationError) as exc_info:
            loader.create_template("Promo", "", "77")

        assert str(exc_info.value) == "Content is required"
