"""Google Drive adapter.

Translates file and folder actions into Drive v3 API calls. Every call goes
through the retry policy, and every failure surfaces as a
RemoteOperationError naming the action that failed.
"""

import io
import logging
from typing import Optional, List, Dict, Any, Iterator, Tuple

from googleapiclient.http import MediaFileUpload, MediaIoBaseDownload

from ..auth import CredentialProvider
from ..exceptions import PermissionGrantError, RemoteOperationError
from ..retry import RetryPolicy
from ..timing import time_api_call
from .service import get_drive_service

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
PUBLIC_DOWNLOAD_ENDPOINT = "https://drive.google.com/uc"

# appProperties mark for files created but not yet made public
STATE_KEY = "drivegate_state"
PENDING_GRANT = "pending-grant"

DOWNLOAD_CHUNK_SIZE = 1024 * 1024
PAGE_SIZE = 100

FILE_FIELDS = "id, name, mimeType"
METADATA_FIELDS = "id, name, mimeType, webViewLink, webContentLink, parents"


def public_download_link(file_id: str) -> str:
    """Direct-download URL for a file readable by anyone with the link."""
    return f"{PUBLIC_DOWNLOAD_ENDPOINT}?id={file_id}"


def escape_query_value(value: str) -> str:
    """Escape a string for use inside a single-quoted Drive query literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _status_only(resp, content):
    return resp.status


class DriveClient:
    """Drive v3 adapter used by the file and folder services.

    Args:
        provider: Pre-authorized credential provider (owned by the caller)
        retry_policy: Retry behaviour for transient failures
        service: Prebuilt Drive service; when omitted a service is built per
            operation from the provider's credentials
    """

    def __init__(
        self,
        provider: Optional[CredentialProvider] = None,
        retry_policy: Optional[RetryPolicy] = None,
        service=None,
    ):
        if provider is None and service is None:
            raise ValueError("DriveClient needs a credential provider or a service")
        self.provider = provider
        self.retry = retry_policy or RetryPolicy()
        self._service = service

    def _get_service(self):
        # googleapiclient services are not thread-safe; each operation gets its own.
        if self._service is not None:
            return self._service
        return get_drive_service(self.provider)

    def _execute(self, action: str, request_factory):
        """Build a fresh request per attempt and execute it under the retry policy."""
        return self.retry.call(action, lambda: request_factory().execute())

    def _list_all(self, action: str, service, query: str, fields: str) -> List[Dict[str, Any]]:
        items = []
        page_token = None
        while True:
            results = self._execute(action, lambda: service.files().list(
                q=query,
                pageSize=PAGE_SIZE,
                pageToken=page_token,
                fields=f"nextPageToken, files({fields})",
            ))
            items.extend(results.get("files", []))
            page_token = results.get("nextPageToken")
            if not page_token:
                return items

    @time_api_call
    def create(
        self,
        name: str,
        content_type: str,
        path: str,
        parent_folder_id: Optional[str] = None
    ) -> dict:
        """
        Upload a local file to Drive and make it readable by anyone with the link.

        The file is created with a pending-grant mark, the public permission is
        granted, then the mark is cleared. If granting fails the file stays in
        Drive, private and marked, for a later reconciliation pass.

        Args:
            name: Display name in Drive
            content_type: MIME type for both metadata and media
            path: Local path of the content
            parent_folder_id: Folder to nest the file in. None or 'root' for My Drive.

        Returns:
            Dict with file id and name

        Raises:
            RemoteOperationError: If the upload fails
            PermissionGrantError: If the upload succeeded but the grant failed
        """
        service = self._get_service()
        body = {
            "name": name,
            "mimeType": content_type,
            "appProperties": {STATE_KEY: PENDING_GRANT},
        }
        if parent_folder_id and parent_folder_id != "root":
            body["parents"] = [parent_folder_id]

        created = self._execute("create", lambda: service.files().create(
            body=body,
            media_body=MediaFileUpload(path, mimetype=content_type, resumable=True),
            fields="id, name",
        ))
        file_id = created.get("id")
        logger.info(f"Uploaded '{name}' to Drive as {file_id}")

        try:
            self._grant_public_read(service, file_id)
        except RemoteOperationError as e:
            logger.error(f"File {file_id} uploaded but left private: {e}")
            raise PermissionGrantError(file_id, e.cause) from e

        return {"id": file_id, "name": created.get("name")}

    def _grant_public_read(self, service, file_id: str):
        self._execute("grant", lambda: service.permissions().create(
            fileId=file_id,
            body={"type": "anyone", "role": "reader"},
        ))
        self._execute("grant", lambda: service.files().update(
            fileId=file_id,
            body={"appProperties": {STATE_KEY: None}},
            fields="id",
        ))

    @time_api_call
    def grant_public_read(self, file_id: str):
        """Make a file readable by anyone with the link and clear its pending mark."""
        self._grant_public_read(self._get_service(), file_id)
        logger.info(f"Granted public read on {file_id}")

    @time_api_call
    def list_pending_grants(self) -> List[Dict[str, Any]]:
        """List files still carrying the pending-grant mark."""
        service = self._get_service()
        query = (
            f"appProperties has {{ key='{STATE_KEY}' and value='{PENDING_GRANT}' }} "
            "and trashed = false"
        )
        return self._list_all("list", service, query, "id, name")

    @time_api_call
    def fetch(self, file_id: str) -> Tuple[dict, Iterator[bytes]]:
        """
        Open a file's content for streaming.

        The metadata lookup happens immediately so an unknown id fails before
        any byte is produced. The returned iterator downloads lazily; a
        failure while iterating raises RemoteOperationError and bytes already
        yielded stay delivered.

        Returns:
            Tuple of (dict with id, name and mimeType; iterator of byte chunks)
        """
        service = self._get_service()
        meta = self._execute("fetch", lambda: service.files().get(
            fileId=file_id,
            fields=FILE_FIELDS,
        ))
        return meta, self._stream(service, file_id)

    def _stream(self, service, file_id: str) -> Iterator[bytes]:
        buffer = io.BytesIO()
        downloader = MediaIoBaseDownload(
            buffer,
            service.files().get_media(fileId=file_id),
            chunksize=DOWNLOAD_CHUNK_SIZE,
        )
        done = False
        while not done:
            _, done = self.retry.call("fetch", downloader.next_chunk)
            chunk = buffer.getvalue()
            if chunk:
                yield chunk
            buffer.seek(0)
            buffer.truncate(0)

    @time_api_call
    def metadata(self, file_id: str) -> dict:
        """
        Get a file's metadata.

        Returns:
            Dict with id, name, mimeType, webViewLink, webContentLink, parents
            and publicDownloadLink (built locally, not returned by Drive)
        """
        service = self._get_service()
        meta = self._execute("metadata", lambda: service.files().get(
            fileId=file_id,
            fields=METADATA_FIELDS,
        ))
        return {
            "id": meta.get("id"),
            "name": meta.get("name"),
            "mimeType": meta.get("mimeType"),
            "webViewLink": meta.get("webViewLink"),
            "webContentLink": meta.get("webContentLink"),
            "parents": meta.get("parents", []),
            "publicDownloadLink": public_download_link(meta.get("id") or file_id),
        }

    @time_api_call
    def update(self, file_id: str, name: str, content_type: str, path: str) -> dict:
        """Replace a file's name, type and content in place. The id does not change."""
        service = self._get_service()
        updated = self._execute("update", lambda: service.files().update(
            fileId=file_id,
            body={"name": name, "mimeType": content_type},
            media_body=MediaFileUpload(path, mimetype=content_type, resumable=True),
            fields="id, name",
        ))
        logger.info(f"Updated Drive file {file_id} with '{name}'")
        return {"id": updated.get("id"), "name": updated.get("name")}

    def _delete(self, action: str, file_id: str) -> int:
        service = self._get_service()

        def request_factory():
            request = service.files().delete(fileId=file_id)
            request.postproc = _status_only
            return request

        status = self._execute(action, request_factory)
        logger.info(f"Deleted Drive item {file_id} (status {status})")
        return status

    @time_api_call
    def delete(self, file_id: str) -> int:
        """Delete a file. Returns the HTTP status of Drive's response (204 on success)."""
        return self._delete("delete", file_id)

    @time_api_call
    def search(self, name_substring: str) -> List[Dict[str, Any]]:
        """Find files whose name contains the given substring."""
        service = self._get_service()
        query = f"name contains '{escape_query_value(name_substring)}' and trashed = false"
        return self._list_all("search", service, query, FILE_FIELDS)

    @time_api_call
    def list_files(self, content_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List files, optionally restricted to one MIME type.

        Without a MIME type, folders are excluded.
        """
        service = self._get_service()
        if content_type:
            query = f"mimeType = '{escape_query_value(content_type)}' and trashed = false"
        else:
            query = f"mimeType != '{FOLDER_MIME_TYPE}' and trashed = false"
        files = self._list_all("list", service, query, FILE_FIELDS)
        if not content_type:
            files = [f for f in files if f.get("mimeType") != FOLDER_MIME_TYPE]
        return files

    @time_api_call
    def list_folders(self) -> List[Dict[str, Any]]:
        """List every folder as {id, name}."""
        service = self._get_service()
        query = f"mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        return self._list_all("list_folders", service, query, "id, name")

    @time_api_call
    def create_folder(self, name: str, parent_id: Optional[str] = None) -> dict:
        """
        Create a new folder in Google Drive.

        Args:
            name: Name for the new folder
            parent_id: Parent folder ID. Use 'root' or None for My Drive root.

        Returns:
            Dict with folder id and name
        """
        service = self._get_service()
        file_metadata = {
            "name": name,
            "mimeType": FOLDER_MIME_TYPE
        }
        if parent_id and parent_id != "root":
            file_metadata["parents"] = [parent_id]

        folder = self._execute("create_folder", lambda: service.files().create(
            body=file_metadata,
            fields="id, name"
        ))
        logger.info(f"Created Drive folder '{name}' as {folder.get('id')}")
        return {"id": folder.get("id"), "name": folder.get("name")}

    @time_api_call
    def delete_folder(self, folder_id: str) -> int:
        """Delete a folder. Returns the HTTP status of Drive's response (204 on success)."""
        return self._delete("delete_folder", folder_id)
