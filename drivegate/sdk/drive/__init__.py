"""Google Drive adapter and the services built on it."""

from .service import get_drive_service
from .client import DriveClient, public_download_link, FOLDER_MIME_TYPE
from .files import FileOperations
from .folders import FolderOperations

__all__ = [
    "get_drive_service",
    "DriveClient",
    "public_download_link",
    "FOLDER_MIME_TYPE",
    "FileOperations",
    "FolderOperations",
]
