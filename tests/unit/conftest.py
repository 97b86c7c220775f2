"""
Unit test fixtures.

FakeDriveClient stands in for the Drive adapter: it keeps files and folders
in memory, records which actions were called, and can be told to fail a
given action the way the real adapter does (RemoteOperationError).
"""

import copy

import pytest
from fastapi.testclient import TestClient

from drivegate.api import create_app
from drivegate.sdk.config import DEFAULT_CONFIG
from drivegate.sdk.drive import FOLDER_MIME_TYPE, public_download_link
from drivegate.sdk.exceptions import PermissionGrantError, RemoteOperationError
from drivegate.sdk.stage import TemporaryStage


class FakeDriveClient:
    """In-memory Drive adapter with the same surface as DriveClient."""

    def __init__(self):
        self.items = {}
        self.calls = []
        self.failures = {}
        self.delete_status = 204
        self._counter = 0

    def fail(self, action: str, cause: Exception = None):
        self.failures[action] = cause or ConnectionError("network unreachable")

    def _check(self, action: str):
        self.calls.append(action)
        if action in self.failures:
            raise RemoteOperationError(action, self.failures[action])

    def _get(self, action: str, item_id: str) -> dict:
        if item_id not in self.items:
            raise RemoteOperationError(action, LookupError(f"File not found: {item_id}"))
        return self.items[item_id]

    def _new_id(self) -> str:
        self._counter += 1
        return f"fake{self._counter:04d}abcdef"

    def create(self, name, content_type, path, parent_folder_id=None):
        self._check("create")
        with open(path, "rb") as f:
            content = f.read()
        file_id = self._new_id()
        self.items[file_id] = {
            "id": file_id,
            "name": name,
            "mimeType": content_type,
            "content": content,
            "parents": [parent_folder_id] if parent_folder_id else [],
            "pending": True,
        }
        if "grant" in self.failures:
            self.calls.append("grant")
            raise PermissionGrantError(file_id, self.failures["grant"])
        self.items[file_id]["pending"] = False
        return {"id": file_id, "name": name}

    def grant_public_read(self, file_id):
        self._check("grant")
        self._get("grant", file_id)["pending"] = False

    def list_pending_grants(self):
        self._check("list")
        return [{"id": i["id"], "name": i["name"]} for i in self.items.values() if i.get("pending")]

    def fetch(self, file_id):
        self._check("fetch")
        item = self._get("fetch", file_id)
        content = item["content"]
        chunks = [content[i:i + 4] for i in range(0, len(content), 4)]
        meta = {"id": file_id, "name": item["name"], "mimeType": item["mimeType"]}
        return meta, iter(chunks)

    def metadata(self, file_id):
        self._check("metadata")
        item = self._get("metadata", file_id)
        return {
            "id": file_id,
            "name": item["name"],
            "mimeType": item["mimeType"],
            "webViewLink": f"https://drive.google.com/file/d/{file_id}/view",
            "webContentLink": f"https://drive.google.com/uc?id={file_id}&export=download",
            "parents": item["parents"],
            "publicDownloadLink": public_download_link(file_id),
        }

    def update(self, file_id, name, content_type, path):
        self._check("update")
        item = self._get("update", file_id)
        with open(path, "rb") as f:
            content = f.read()
        item.update(name=name, mimeType=content_type, content=content)
        return {"id": file_id, "name": name}

    def delete(self, file_id):
        self._check("delete")
        self._get("delete", file_id)
        if self.delete_status == 204:
            del self.items[file_id]
        return self.delete_status

    def search(self, name_substring):
        self._check("search")
        return [
            {"id": i["id"], "name": i["name"], "mimeType": i["mimeType"]}
            for i in self.items.values() if name_substring in i["name"]
        ]

    def list_files(self, content_type=None):
        self._check("list")
        return [
            {"id": i["id"], "name": i["name"], "mimeType": i["mimeType"]}
            for i in self.items.values()
            if (i["mimeType"] == content_type if content_type else i["mimeType"] != FOLDER_MIME_TYPE)
        ]

    def list_folders(self):
        self._check("list_folders")
        return [
            {"id": i["id"], "name": i["name"]}
            for i in self.items.values() if i["mimeType"] == FOLDER_MIME_TYPE
        ]

    def create_folder(self, name, parent_id=None):
        self._check("create_folder")
        folder_id = self._new_id()
        self.items[folder_id] = {
            "id": folder_id,
            "name": name,
            "mimeType": FOLDER_MIME_TYPE,
            "content": b"",
            "parents": [parent_id] if parent_id else [],
        }
        return {"id": folder_id, "name": name}

    def delete_folder(self, folder_id):
        self._check("delete_folder")
        self._get("delete_folder", folder_id)
        if self.delete_status == 204:
            del self.items[folder_id]
        return self.delete_status


@pytest.fixture
def fake_drive():
    return FakeDriveClient()


@pytest.fixture
def app_config(tmp_path):
    """Default config with scratch directories under tmp_path."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["storage"]["image_dir"] = str(tmp_path / "img")
    config["storage"]["upload_dir"] = str(tmp_path / "uploads")
    return config


@pytest.fixture
def stage(app_config):
    return TemporaryStage.from_config(app_config)


@pytest.fixture
def client(app_config, fake_drive):
    """TestClient for an app wired to the in-memory Drive."""
    app = create_app(app_config, drive_client=fake_drive)
    with TestClient(app) as test_client:
        yield test_client