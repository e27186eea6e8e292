"""Finds or provisions the Content Builder folder that receives migrated templates."""

import logging
from typing import List, Optional

from ..errors import FolderResolutionError
from ..loaders.base import BaseLoader
from ..loaders.sfmc_loader import SFMCAPIError
from ..models.template import DestinationFolder

logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "Failed to find or create a folder in SFMC. Please provide a valid folderId."


class FolderResolver:
    """Resolves the destination folder id once per run."""

    def __init__(
        self,
        loader: BaseLoader,
        root_name: str = "Content Builder",
        target_name: str = "HubSpot Templates"
    ):
        self.loader = loader
        self.root_name = root_name
        self.target_name = target_name

    def resolve(self, explicit_folder_id: Optional[str] = None) -> str:
        """
        Get the folder id to create assets in.

        An explicit id is trusted and returned without any call. Otherwise
        the root folder is located and the target child reused or created.

        Raises:
            FolderResolutionError: If the root is missing or any list/create step fails
        """
        if explicit_folder_id:
            logger.info(f"Using provided folder ID: {explicit_folder_id}")
            return str(explicit_folder_id)

        try:
            folders = self.loader.list_folders()
            root = self._find(folders, self.root_name)
            if root is None:
                raise FolderResolutionError(
                    FAILURE_MESSAGE,
                    details=f"{self.root_name} folder not found",
                )

            existing = self._find(folders, self.target_name, parent_id=root.id)
            if existing is not None:
                logger.info(f"Found existing {self.target_name} folder with ID: {existing.id}")
                return existing.id

            created = self.loader.create_folder(self.target_name, root.id)
            logger.info(f"Created new {self.target_name} folder with ID: {created.id}")
            return created.id

        except FolderResolutionError:
            raise
        except SFMCAPIError as e:
            logger.error(f"Error finding/creating SFMC folder: {e.message}")
            raise FolderResolutionError(FAILURE_MESSAGE, details=e.message) from e
        except Exception as e:
            logger.exception("Unexpected error finding/creating SFMC folder")
            raise FolderResolutionError(FAILURE_MESSAGE, details=str(e)) from e

    @staticmethod
    def _find(
        folders: List[DestinationFolder],
        name: str,
        parent_id: Optional[str] = None
    ) -> Optional[DestinationFolder]:
        for folder in folders:
            if folder.name != name:
                continue
            if parent_id is not None and folder.parent_id != parent_id:
                continue
            return folder
        return None
