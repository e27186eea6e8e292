"""Salesforce Marketing Cloud Content Builder loader."""

import logging
from typing import Any, Dict, List, Optional

import requests

from .base import BaseLoader
from ..errors import AssetCreationError, AuthError
from ..models.credentials import DestinationCredentials, DestinationSession
from ..models.template import CreatedAsset, DestinationFolder

logger = logging.getLogger(__name__)

DEFAULT_AUTH_HOST_TEMPLATE = "https://{subdomain}.auth.marketingcloudapis.com"
DEFAULT_REST_HOST_TEMPLATE = "https://{subdomain}.rest.marketingcloudapis.com"

TEMPLATE_ASSET_TYPE = {"name": "template", "id": 4}


class SFMCAPIError(Exception):
    """A Marketing Cloud REST call returned an error."""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details


def _error_message(response: requests.Response) -> str:
    """Pull the most useful error message out of an SFMC error response."""
    try:
        data = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"

    if isinstance(data, dict):
        message = data.get("message") or data.get("error_description") or data.get("error")
        if message:
            return str(message)
        validation = data.get("validationErrors")
        if validation:
            return "; ".join(str(v.get("message", v)) for v in validation if v)
    return str(data)


def _json_body(response: requests.Response) -> Dict[str, Any]:
    try:
        data = response.json() if response.text else {}
    except ValueError as e:
        raise SFMCAPIError(f"Invalid JSON response: {e}", response.status_code)
    return data if isinstance(data, dict) else {}


class SFMCAuthClient:
    """Exchanges installed-package credentials for an access token."""

    def __init__(
        self,
        auth_host_template: str = DEFAULT_AUTH_HOST_TEMPLATE,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None
    ):
        self.auth_host_template = auth_host_template
        self.timeout = timeout
        self._session = session or requests.Session()

    def get_token(self, credentials: DestinationCredentials) -> DestinationSession:
        """
        Mint an access token with the client credentials grant.

        Args:
            credentials: Complete installed-package credentials

        Returns:
            DestinationSession bound to the credentials' tenant

        Raises:
            AuthError: If the exchange fails for any reason
        """
        if not credentials.is_complete:
            raise AuthError("SFMC credentials require clientId, clientSecret and subdomain.")

        url = f"{self.auth_host_template.format(subdomain=credentials.subdomain).rstrip('/')}/v2/token"
        payload = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }

        try:
            response = self._session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"SFMC token request failed: {e}")
            raise AuthError(
                "Failed to authenticate with SFMC using provided credentials.",
                details=str(e),
            ) from e

        if not 200 <= response.status_code < 300:
            message = _error_message(response)
            logger.error(f"SFMC token exchange rejected ({response.status_code}): {message}")
            raise AuthError(
                "Failed to authenticate with SFMC using provided credentials.",
                details=message,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise AuthError(
                "Failed to authenticate with SFMC using provided credentials.",
                details=f"Invalid token response: {e}",
            ) from e

        access_token = data.get("access_token") if isinstance(data, dict) else None
        if not access_token:
            raise AuthError(
                "Failed to authenticate with SFMC using provided credentials.",
                details="Token response did not include an access_token",
            )

        logger.info(f"Obtained SFMC access token for subdomain {credentials.subdomain}")
        return DestinationSession(
            access_token=access_token,
            subdomain=credentials.subdomain,
            rest_instance_url=data.get("rest_instance_url"),
        )


class SFMCLoader(BaseLoader):
    """
    Loader for the Content Builder asset API.

    Handles:
    - Category (folder) listing and creation
    - Template asset creation
    """

    CATEGORIES_PATH = "/asset/v1/content/categories"
    ASSETS_PATH = "/asset/v1/content/assets"

    def __init__(
        self,
        destination: DestinationSession,
        rest_host_template: str = DEFAULT_REST_HOST_TEMPLATE,
        timeout: float = 30.0,
        page_size: int = 250,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the SFMC loader.

        Args:
            destination: Access token and tenant addressing
            rest_host_template: REST host with a ``{subdomain}`` placeholder
            timeout: Per-request timeout in seconds
            page_size: Page size for category listing
            session: Custom requests session
        """
        super().__init__("sfmc")
        self.destination = destination
        base_url = destination.rest_base_url(rest_host_template)
        if not base_url:
            raise AuthError("SFMC credentials are missing the subdomain. Please reconnect SFMC.")
        self.base_url = base_url
        self.timeout = timeout
        self.page_size = page_size
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        session = requests.Session()
        session.headers["Content-Type"] = "application/json"
        return session

    def _get_auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.destination.access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"

        try:
            response = self._session.request(
                method, url, headers=self._get_auth_headers(), timeout=self.timeout, **kwargs
            )
        except requests.exceptions.RequestException as e:
            raise SFMCAPIError(f"Request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise SFMCAPIError(
                _error_message(response),
                status_code=response.status_code,
                details=response.text,
            )

        return _json_body(response)

    def list_folders(self) -> List[DestinationFolder]:
        """List all Content Builder categories, following pagination."""
        folders: List[DestinationFolder] = []
        page = 1

        while True:
            data = self._request(
                "GET",
                self.CATEGORIES_PATH,
                params={"$page": page, "$pagesize": self.page_size},
            )
            items = data.get("items") or []
            folders.extend(_parse_folder(item) for item in items)

            total = _parse_count(data.get("count"))
            if not items or len(items) < self.page_size:
                break
            if total is not None and len(folders) >= total:
                break
            page += 1

        logger.info(f"Listed {len(folders)} SFMC folders")
        return folders

    def create_folder(self, name: str, parent_id: str) -> DestinationFolder:
        """Create a Content Builder category."""
        data = self._request(
            "POST",
            self.CATEGORIES_PATH,
            json={"name": name, "parentId": _numeric_id(parent_id)},
        )
        if "id" not in data:
            raise SFMCAPIError("Folder create response did not include an id", details=data)

        folder = _parse_folder({"parentId": parent_id, "name": name, **data})
        logger.info(f"Created SFMC folder '{name}' with ID {folder.id} under {parent_id}")
        return folder

    def create_template(
        self,
        name: str,
        content: str,
        folder_id: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> CreatedAsset:
        """Create a template asset in Content Builder."""
        metadata = metadata or {}
        payload: Dict[str, Any] = {
            "name": name,
            "content": content,
            "assetType": metadata.get("assetType") or TEMPLATE_ASSET_TYPE,
            "category": {"id": _numeric_id(folder_id)},
        }
        if metadata.get("channels") is not None:
            payload["channels"] = metadata["channels"]
        if metadata.get("slots") is not None:
            payload["slots"] = metadata["slots"]

        try:
            data = self._request("POST", self.ASSETS_PATH, json=payload)
        except SFMCAPIError as e:
            raise AssetCreationError(e.message, status_code=e.status_code) from e

        if data.get("id") is None:
            raise AssetCreationError("Asset create response did not include an id")

        asset = CreatedAsset(
            id=str(data["id"]),
            customer_key=data.get("customerKey"),
            response_data=data,
        )
        self.track_created(asset)
        return asset


def _parse_folder(item: Any) -> DestinationFolder:
    try:
        return DestinationFolder.from_api(item)
    except (KeyError, TypeError, AttributeError) as e:
        raise SFMCAPIError(f"Unexpected category payload: {item!r}", details=item) from e


def _parse_count(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SFMCAPIError(f"Unexpected category count: {value!r}", details=value) from e


def _numeric_id(value: Any) -> Any:
    """SFMC expects numeric category ids; pass through anything else."""
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value
