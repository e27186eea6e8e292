"""HubSpot template extractor with a multi-endpoint fallback chain."""

import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from .base import (
    BaseExtractor,
    EndpointStrategy,
    FetchAttempt,
    bare_envelope,
    keyed_envelope,
)
from ..errors import UpstreamFetchError
from ..models.credentials import SourceCredentials
from ..models.template import SourceTemplate

logger = logging.getLogger(__name__)


class HubSpotTemplateExtractor(BaseExtractor):
    """
    Extractor for HubSpot email templates.

    HubSpot has exposed templates through several API generations. Each
    is tried in order, most specific first, and the first one that
    answers wins:

    - CMS templates API (v2)
    - Marketing Email templates API (v3)
    - Legacy Marketing Email API (v1)
    - Email public API (v1)
    """

    DEFAULT_BASE_URL = "https://api.hubapi.com"

    STRATEGIES: Sequence[EndpointStrategy] = (
        EndpointStrategy("cms_v2", "/content/api/v2/templates", keyed_envelope("objects")),
        EndpointStrategy("marketing_email_v3", "/marketing/v3/marketing-emails/templates", keyed_envelope("results")),
        EndpointStrategy("marketing_email_v1", "/marketing-emails/v1/templates", bare_envelope),
        EndpointStrategy("email_public_v1", "/email/public/v1/templates", keyed_envelope("objects")),
    )

    FAILURE_MESSAGE = "Failed to fetch templates from HubSpot API. Please check your token and permissions."

    def __init__(
        self,
        credentials: SourceCredentials,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        strategies: Optional[Sequence[EndpointStrategy]] = None
    ):
        """
        Initialize the HubSpot extractor.

        Args:
            credentials: HubSpot access token
            base_url: Override base URL
            timeout: Per-request timeout in seconds
            session: Custom requests session
            strategies: Override the endpoint fallback order
        """
        super().__init__()
        self.credentials = credentials
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.timeout = timeout
        self.strategies = list(strategies) if strategies is not None else list(self.STRATEGIES)
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()
        session.headers["Content-Type"] = "application/json"
        return session

    def _get_auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.access_token}",
            "Content-Type": "application/json",
        }

    def attempt(self, strategy: EndpointStrategy) -> FetchAttempt:
        """Try a single endpoint and report the outcome without raising."""
        url = f"{self.base_url}{strategy.path}"

        try:
            response = self._session.get(url, headers=self._get_auth_headers(), timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            return FetchAttempt.failed(strategy, f"Request failed: {e}", details=str(e))

        if not 200 <= response.status_code < 300:
            return FetchAttempt.failed(
                strategy,
                f"HTTP error: {response.status_code}",
                details=_response_details(response),
                status_code=response.status_code,
            )

        try:
            items = strategy.extract(response.json())
        except ValueError as e:
            return FetchAttempt.failed(
                strategy,
                f"Unexpected response: {e}",
                details=str(e),
                status_code=response.status_code,
            )

        return FetchAttempt.succeeded(strategy, items)

    def fetch_all(self) -> List[SourceTemplate]:
        """Walk the fallback chain until one endpoint succeeds."""
        self.reset()

        for strategy in self.strategies:
            logger.info(f"Trying HubSpot {strategy.name} endpoint {strategy.path}")
            result = self.attempt(strategy)
            self.attempts.append(result)

            if result.ok:
                templates = [
                    SourceTemplate.from_api(item, endpoint=strategy.name)
                    for item in result.items
                    if isinstance(item, dict)
                ]
                logger.info(f"Got {len(templates)} templates from HubSpot {strategy.name}")
                return templates

            self.add_warning(f"HubSpot {strategy.name} endpoint failed: {result.error}")

        last = self.attempts[-1] if self.attempts else None
        if last is not None:
            logger.error(
                f"All HubSpot template endpoints failed; last was {last.strategy.name} "
                f"(status {last.status_code}): {last.details}"
            )
        raise UpstreamFetchError(
            self.FAILURE_MESSAGE,
            details=last.details if last is not None else None,
        )

    def validate_source(self) -> List[str]:
        errors = super().validate_source()
        if not self.credentials.access_token:
            errors.append("HubSpot access token is required")
        if not self.strategies:
            errors.append("At least one endpoint strategy is required")
        return errors


def _response_details(response: requests.Response) -> Any:
    """Best available description of an error response."""
    try:
        return response.json()
    except ValueError:
        return response.text or None
