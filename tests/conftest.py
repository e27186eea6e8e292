"""Shared fixtures for template migration tests."""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from template_migration.config import Settings
from template_migration.errors import AssetCreationError
from template_migration.extractors.base import BaseExtractor
from template_migration.loaders.base import BaseLoader
from template_migration.models.template import CreatedAsset, DestinationFolder, SourceTemplate
from template_migration.orchestrator import TemplateMigrationOrchestrator
from template_migration.services.credentials import InMemoryCredentialStore


USER_ID = "user-1"


# =============================================================================
# Fakes
# =============================================================================


class FakeExtractor(BaseExtractor):
    """Returns canned HubSpot payloads and counts calls."""

    def __init__(self, items: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None):
        super().__init__()
        self.items = items or []
        self.error = error
        self.calls = 0

    def fetch_all(self) -> List[SourceTemplate]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [SourceTemplate.from_api(item, endpoint="fake") for item in self.items]


class FakeLoader(BaseLoader):
    """In-memory Content Builder that records every call."""

    def __init__(self, folders: Optional[List[DestinationFolder]] = None, fail_names=()):
        super().__init__("fake")
        self.folders = list(folders if folders is not None else [DestinationFolder("1", "Content Builder", "0")])
        self.fail_names = set(fail_names)
        self.created: List[Dict[str, Any]] = []
        self.created_folders: List[DestinationFolder] = []
        self.list_calls = 0

    def list_folders(self) -> List[DestinationFolder]:
        self.list_calls += 1
        return list(self.folders)

    def create_folder(self, name: str, parent_id: str) -> DestinationFolder:
        folder = DestinationFolder(str(100 + len(self.folders)), name, parent_id)
        self.folders.append(folder)
        self.created_folders.append(folder)
        return folder

    def create_template(self, name, content, folder_id, metadata=None) -> CreatedAsset:
        if name in self.fail_names:
            raise AssetCreationError(f"Asset name '{name}' is already taken", status_code=400)
        self.created.append({
            "name": name,
            "content": content,
            "folder_id": folder_id,
            "metadata": metadata,
        })
        count = len(self.created)
        asset = CreatedAsset(id=str(1000 + count), customer_key=f"key-{count}")
        self.track_created(asset)
        return asset


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Default settings with no external services configured."""
    return Settings()


@pytest.fixture
def store():
    """Store with both providers connected for USER_ID."""
    return InMemoryCredentialStore({
        (USER_ID, "hubspot"): {"accessToken": "hs-token"},
        (USER_ID, "sfmc"): {"accessToken": "sfmc-token", "subdomain": "mc123"},
    })


@pytest.fixture
def loader():
    return FakeLoader()


@pytest.fixture
def make_orchestrator(settings, store, loader):
    """Build an orchestrator wired to fakes; never touches the network."""
    def build(extractor=None, run_settings=None, credential_store=None, **overrides):
        extractor = extractor if extractor is not None else FakeExtractor()
        options = {
            "auth_client": MagicMock(),
            "extractor_factory": lambda credentials: extractor,
            "loader_factory": lambda session: loader,
        }
        options.update(overrides)
        return TemplateMigrationOrchestrator(
            run_settings or settings,
            credential_store if credential_store is not None else store,
            **options
        )

    return build


def _make_response(status_code: int = 200, json_data: Any = None, text: Optional[str] = None):
    response = MagicMock()
    response.status_code = status_code
    if isinstance(json_data, Exception):
        response.json.side_effect = json_data
        response.text = text or ""
    else:
        response.json.return_value = json_data
        response.text = text if text is not None else json.dumps(json_data)
    return response


@pytest.fixture
def make_response():
    """Factory for mocked requests responses."""
    return _make_response
