"""Request/response schemas."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class StoredFile(BaseModel):
    """Minimal description of a Drive file returned after upload or update."""
    id: str = Field(description="Identifier assigned by Drive.")
    name: Optional[str] = Field(None, description="Display name in Drive.")


class FileEntry(BaseModel):
    """A file as returned by search and list."""
    id: str
    name: Optional[str] = None
    mimeType: Optional[str] = None


class FileMetadata(BaseModel):
    """Response model for `GET /drive/file/metadata/{fileId}`."""
    id: str
    name: Optional[str] = None
    mimeType: Optional[str] = None
    webViewLink: Optional[str] = None
    webContentLink: Optional[str] = None
    parents: List[str] = Field(default_factory=list)
    publicDownloadLink: str = Field(
        description="Direct download URL, built as https://drive.google.com/uc?id=<id>."
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "1AbCdEfGh",
                "name": "photo.png",
                "mimeType": "image/png",
                "webViewLink": "https://drive.google.com/file/d/1AbCdEfGh/view",
                "webContentLink": "https://drive.google.com/uc?id=1AbCdEfGh&export=download",
                "parents": ["0AFolder"],
                "publicDownloadLink": "https://drive.google.com/uc?id=1AbCdEfGh",
            }
        }
    )


class FilesResponse(BaseModel):
    """Response model for `GET /drive/files` and `GET /drive/search/{fileName}`."""
    files: List[FileEntry]


class StoredFolder(BaseModel):
    id: str
    name: Optional[str] = None


class FoldersResponse(BaseModel):
    """Response model for `GET /drive/folders`."""
    folders: List[StoredFolder]


class CreateFolderRequest(BaseModel):
    """Body of `POST /drive/folder`. Fields are optional so a blank name is a 400, not a 422."""
    folderName: Optional[str] = None
    parentId: Optional[str] = None
