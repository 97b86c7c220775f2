"""File operations: local staging sequenced with Drive persistence."""

import logging
from typing import Optional, List, Dict, Any, BinaryIO, Iterator, Tuple

from ..stage import StagedUpload
from .client import DriveClient

logger = logging.getLogger(__name__)

NO_CONTENT = 204


class FileOperations:
    """Orchestrates the stage and the Drive adapter for file actions.

    Upload and update push to Drive first and only then remove the staged
    copy. A failed push leaves the staged copy on disk.
    """

    def __init__(self, drive: DriveClient):
        self.drive = drive

    def upload(self, staged: StagedUpload, parent_folder_id: Optional[str] = None) -> dict:
        """
        Push a staged upload to Drive, then discard the staged copy.

        Returns:
            Dict with the new file's id and name
        """
        result = self.drive.create(
            staged.original_name,
            staged.content_type,
            staged.path,
            parent_folder_id=parent_folder_id,
        )
        staged.discard()
        return result

    def update(self, file_id: str, staged: StagedUpload) -> dict:
        """Replace a Drive file's content with a staged upload, then discard the staged copy."""
        result = self.drive.update(file_id, staged.original_name, staged.content_type, staged.path)
        staged.discard()
        return result

    def open_download(self, file_id: str) -> Tuple[dict, Iterator[bytes]]:
        """Return (metadata, chunk iterator) for streaming a file to a client."""
        return self.drive.fetch(file_id)

    def download(self, file_id: str, sink: BinaryIO) -> int:
        """
        Stream a file's content into a writable sink.

        Returns:
            Number of bytes written
        """
        _, chunks = self.drive.fetch(file_id)
        written = 0
        for chunk in chunks:
            sink.write(chunk)
            written += len(chunk)
        logger.info(f"Downloaded {written} bytes of {file_id}")
        return written

    def get_metadata(self, file_id: str) -> dict:
        return self.drive.metadata(file_id)

    def delete(self, file_id: str) -> bool:
        status = self.drive.delete(file_id)
        if status != NO_CONTENT:
            logger.warning(f"Drive answered {status} deleting {file_id}")
        return status == NO_CONTENT

    def search(self, term: str) -> List[Dict[str, Any]]:
        return self.drive.search(term)

    def list_all(self, content_type: Optional[str] = None) -> List[Dict[str, Any]]:
        return self.drive.list_files(content_type)

    def reconcile(self) -> List[str]:
        """
        Finish every upload whose public-read grant never completed.

        Returns:
            Ids of the files that were repaired
        """
        repaired = []
        for item in self.drive.list_pending_grants():
            self.drive.grant_public_read(item["id"])
            repaired.append(item["id"])
        logger.info(f"Reconciliation repaired {len(repaired)} file(s)")
        return repaired
