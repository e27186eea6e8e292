"""Migration orchestrator - coordinates a template migration run."""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set

import requests

from .config import Settings
from .errors import MigrationError, RequestValidationFailed
from .extractors.base import BaseExtractor
from .extractors.hubspot_extractor import HubSpotTemplateExtractor
from .loaders.base import BaseLoader
from .loaders.sfmc_loader import SFMCAuthClient, SFMCLoader, TEMPLATE_ASSET_TYPE
from .models.credentials import (
    DestinationCredentials,
    DestinationSession,
    SourceCredentials,
)
from .models.migration import (
    MigrationRequest,
    MigrationResult,
    MigrationSummary,
    ResultStatus,
    RunState,
)
from .models.template import SourceTemplate
from .services.converter import TemplateConverter, find_markup, resolve_custom_markup
from .services.credentials import CredentialResolver, CredentialStore
from .services.folder_resolver import FolderResolver

logger = logging.getLogger(__name__)

ExtractorFactory = Callable[[SourceCredentials], BaseExtractor]
LoaderFactory = Callable[[DestinationSession], BaseLoader]


class TemplateMigrationOrchestrator:
    """
    Orchestrates one HubSpot to SFMC template migration run.

    Handles:
    - Credential resolution for both systems
    - Destination folder resolution (once per run)
    - Custom template lists or fetching from HubSpot
    - Per-template conversion and asset creation
    - Result and error accumulation

    Create one orchestrator per run.
    """

    def __init__(
        self,
        settings: Settings,
        credential_store: CredentialStore,
        auth_client: Optional[SFMCAuthClient] = None,
        extractor_factory: Optional[ExtractorFactory] = None,
        loader_factory: Optional[LoaderFactory] = None,
        converter: Optional[TemplateConverter] = None,
        http_session: Optional[requests.Session] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            settings: Runtime settings
            credential_store: Store for per-user integration tokens
            auth_client: SFMC token exchange client
            extractor_factory: Builds the source extractor from credentials
            loader_factory: Builds the destination loader from a session
            converter: Template converter
            http_session: Shared requests session for the default clients;
                one is created, and closed after the run, when omitted
        """
        self.settings = settings
        self._owns_session = http_session is None
        self.http_session = http_session if http_session is not None else requests.Session()
        self.auth_client = auth_client or SFMCAuthClient(
            auth_host_template=settings.sfmc_auth_host_template,
            timeout=settings.http_timeout,
            session=self.http_session,
        )
        self.resolver = CredentialResolver(credential_store, self.auth_client)
        self.extractor_factory = extractor_factory or self._create_extractor
        self.loader_factory = loader_factory or self._create_loader
        self.converter = converter or TemplateConverter()

        self.state: Optional[RunState] = None
        self.summary: Optional[MigrationSummary] = None

    def _create_extractor(self, credentials: SourceCredentials) -> BaseExtractor:
        return HubSpotTemplateExtractor(
            credentials,
            base_url=self.settings.hubspot_api_base,
            timeout=self.settings.http_timeout,
            session=self.http_session,
        )

    def _create_loader(self, destination: DestinationSession) -> BaseLoader:
        return SFMCLoader(
            destination,
            rest_host_template=self.settings.sfmc_rest_host_template,
            timeout=self.settings.http_timeout,
            session=self.http_session,
        )

    def _transition(self, state: RunState) -> None:
        logger.debug(f"Migration run state: {self.state.value if self.state else None} -> {state.value}")
        self.state = state
        if self.summary is not None and state in (RunState.CUSTOM_MODE, RunState.FETCH_MODE):
            self.summary.mode = state

    def run(self, request: MigrationRequest) -> MigrationSummary:
        """
        Run the migration.

        Returns:
            MigrationSummary with per-template results

        Raises:
            MigrationError: On any run-level failure; no partial summary is returned
        """
        self.summary = MigrationSummary(started_at=datetime.utcnow())

        try:
            if not request.user_id:
                raise RequestValidationFailed("User ID is required")

            self._transition(RunState.RESOLVING_CREDENTIALS)
            source = self.resolver.resolve_source(request.user_id, request.hubspot_token)
            destination = self.resolver.resolve_destination(
                request.user_id,
                DestinationCredentials.from_request(request.sfmc_credentials),
            )
            loader = self.loader_factory(destination)

            self._transition(RunState.RESOLVING_FOLDER)
            folder_resolver = FolderResolver(
                loader,
                root_name=self.settings.sfmc_root_folder,
                target_name=self.settings.sfmc_target_folder,
            )
            folder_id = folder_resolver.resolve(request.folder_id)
            self.summary.folder_id = folder_id

            if request.is_custom:
                self._transition(RunState.CUSTOM_MODE)
                templates = self._custom_templates(request.custom_templates)
                logger.info(f"Using {len(templates)} custom templates provided by user")
            else:
                self._transition(RunState.FETCH_MODE)
                templates = self._fetch_templates(source, request.limit)
                if not self.summary.templates_found:
                    self.summary.message = "No email templates found in HubSpot"
                    return self._finish()

            self._transition(RunState.ITERATING)
            self._migrate_all(templates, loader, folder_id, custom=request.is_custom)
            self.summary.message = self.summary.build_message()
            return self._finish()

        except MigrationError as e:
            self._transition(RunState.FAILED)
            logger.error(f"Template migration failed: {e.message}")
            raise

        finally:
            self.close()

    def close(self) -> None:
        """Close the HTTP session if this orchestrator created it."""
        if self._owns_session:
            self.http_session.close()

    def _finish(self) -> MigrationSummary:
        self._transition(RunState.SUMMARIZED)
        self.summary.completed_at = datetime.utcnow()
        logger.info(
            f"{self.summary.message} ({self.summary.templates_count}/{self.summary.total_attempted} attempted)"
        )
        return self.summary

    def _fetch_templates(self, source: SourceCredentials, limit: Optional[int]) -> List[SourceTemplate]:
        """Fetch from HubSpot, then apply the limit."""
        extractor = self.extractor_factory(source)
        logger.info("Fetching HubSpot templates directly from API...")
        templates = extractor.fetch_all()
        self.summary.templates_found = len(templates)

        if limit is None:
            limit = self.settings.default_template_limit
        selected = templates[:max(limit, 0)]
        logger.info(f"Found {len(templates)} email templates, migrating {len(selected)}")
        return selected

    def _custom_templates(self, items: List[Dict[str, Any]]) -> List[SourceTemplate]:
        templates = []
        for item in items:
            explicit_id = item.get("id")
            templates.append(SourceTemplate(
                id=str(explicit_id) if explicit_id else f"custom-{int(time.time() * 1000)}",
                name=item.get("name") or "",
                raw=item,
                generated_id=not explicit_id,
            ))
        return templates

    def _migrate_all(
        self,
        templates: List[SourceTemplate],
        loader: BaseLoader,
        folder_id: str,
        custom: bool
    ) -> None:
        seen: Set[str] = set()

        for template in templates:
            if custom:
                markup = resolve_custom_markup(template.raw)
            else:
                match = find_markup(template.raw)
                if match is None:
                    logger.warning(
                        f"Template {template.name} (ID: {template.id}) has no identifiable content, "
                        f"skipping; properties: {template.field_names}"
                    )
                    self.summary.skipped.append(template.to_dict())
                    continue
                logger.debug(f"Using '{match.field}' property for template {template.name}")
                markup = match.markup

            if template.id is not None and not template.generated_id:
                if template.id in seen:
                    logger.warning(f"Template {template.name} (ID: {template.id}) already migrated in this run, skipping")
                    self.summary.skipped.append(template.to_dict())
                    continue
                seen.add(template.id)

            self.summary.record(self._migrate_one(template, markup, loader, folder_id, custom))

    def _migrate_one(
        self,
        template: SourceTemplate,
        markup: str,
        loader: BaseLoader,
        folder_id: str,
        custom: bool
    ) -> MigrationResult:
        """Convert and create a single template; never raises."""
        label = "custom template" if custom else "template"
        logger.info(f"Processing {label}: {template.name} (ID: {template.id})")

        try:
            converted = self.converter.convert(markup, name=template.name)
            for warning in converted.warnings:
                logger.warning(f"Template {template.name}: {warning}")

            asset = loader.create_template(
                template.name,
                converted.content,
                folder_id,
                {
                    "channels": converted.channels,
                    "slots": converted.slots,
                    "assetType": TEMPLATE_ASSET_TYPE,
                },
            )

            logger.info(f"Successfully migrated {label}: {template.name}")
            return MigrationResult(
                source_id=template.id,
                source_name=template.name,
                status=ResultStatus.SUCCESS,
                custom=custom,
                sfmc_id=asset.id,
                sfmc_customer_key=asset.customer_key,
            )

        except Exception as e:
            logger.error(f"Error migrating {label} {template.name} (ID: {template.id}): {e}")
            return MigrationResult(
                source_id=template.id,
                source_name=template.name,
                status=ResultStatus.ERROR,
                custom=custom,
                error=str(e),
            )
