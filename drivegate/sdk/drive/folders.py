"""Google Drive folder operations."""

import logging
from typing import Optional, List, Dict, Any

from ..exceptions import ValidationError
from .client import DriveClient

logger = logging.getLogger(__name__)

NO_CONTENT = 204


class FolderOperations:
    """Create, list and delete Drive folders.

    Deleting a folder issues a single delete on the folder itself. Drive
    removes descendants owned by the caller; items owned by others are
    orphaned. The gateway does not walk the tree.
    """

    def __init__(self, drive: DriveClient):
        self.drive = drive

    def create(self, name: str, parent_id: Optional[str] = None) -> dict:
        """
        Create a folder.

        Raises:
            ValidationError: If the name is blank (no Drive call is made)
        """
        if not name or not name.strip():
            raise ValidationError("Folder name is required.")
        return self.drive.create_folder(name.strip(), parent_id=parent_id or None)

    def list(self) -> List[Dict[str, Any]]:
        return self.drive.list_folders()

    def delete(self, folder_id: str) -> bool:
        status = self.drive.delete_folder(folder_id)
        if status != NO_CONTENT:
            logger.warning(f"Drive answered {status} deleting folder {folder_id}")
        return status == NO_CONTENT
