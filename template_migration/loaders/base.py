"""Base loader interface for destination content stores."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import logging

from ..models.template import CreatedAsset, DestinationFolder

logger = logging.getLogger(__name__)


class BaseLoader(ABC):
    """
    Base class for destination loaders.

    Loaders own the folder and asset calls against the destination.
    They never retry: a failed call surfaces to the caller as-is.
    """

    def __init__(self, target_service: str):
        """
        Initialize the loader.

        Args:
            target_service: Name of the target service
        """
        self.target_service = target_service
        self._created_ids: List[str] = []

    @abstractmethod
    def list_folders(self) -> List[DestinationFolder]:
        """List every folder visible to the credentials."""
        pass

    @abstractmethod
    def create_folder(self, name: str, parent_id: str) -> DestinationFolder:
        """Create a folder under ``parent_id``."""
        pass

    @abstractmethod
    def create_template(
        self,
        name: str,
        content: str,
        folder_id: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> CreatedAsset:
        """
        Create a template asset.

        Args:
            name: Asset name
            content: Converted template markup
            folder_id: Destination folder
            metadata: Channels, slots and asset type

        Returns:
            Identifiers of the created asset
        """
        pass

    def track_created(self, asset: CreatedAsset) -> None:
        """Remember an asset created during this run."""
        self._created_ids.append(asset.id)

    @property
    def created_ids(self) -> List[str]:
        return self._created_ids.copy()
