import logging
from typing import Iterator, Optional
from urllib.parse import quote

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Path,
    Query,
    UploadFile,
    status
)
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse, StreamingResponse

from drivegate.api.dependencies import (
    get_file_operations,
    get_folder_operations,
    get_stage,
)
from drivegate.api.schemas import (
    CreateFolderRequest,
    FileMetadata,
    FilesResponse,
    FoldersResponse,
    StoredFile,
    StoredFolder,
)
from drivegate.sdk.drive import FileOperations, FolderOperations
from drivegate.sdk.exceptions import DriveGateError, ValidationError
from drivegate.sdk.stage import TemporaryStage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drive")


async def _call(failure_message: str, func, *args, **kwargs):
    """Run a blocking service call off the event loop; Drive failures become a generic 500."""
    try:
        return await run_in_threadpool(func, *args, **kwargs)
    except ValidationError:
        raise
    except DriveGateError as e:
        logger.error(f"{failure_message} Cause: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure_message
        )


async def _stage_and_upload(
    upload: Optional[UploadFile],
    kind: str,
    missing_message: str,
    folder_id: Optional[str],
    stage: TemporaryStage,
    files: FileOperations,
) -> StoredFile:
    if upload is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=missing_message)

    staged = await _call(
        "Error staging upload.",
        stage.stage, upload.file, upload.filename, upload.content_type, kind
    )
    result = await _call("Error uploading file to Drive.", files.upload, staged, folder_id or None)
    return StoredFile(**result)


@router.post("/upload/image", response_model=StoredFile)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    stage: TemporaryStage = Depends(get_stage),
    files: FileOperations = Depends(get_file_operations),
):
    """Upload an image (multipart field `image`) to Drive and make it public."""
    return await _stage_and_upload(image, "image", "No image uploaded.", folder_id, stage, files)


@router.post("/upload/file", response_model=StoredFile)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    stage: TemporaryStage = Depends(get_stage),
    files: FileOperations = Depends(get_file_operations),
):
    """Upload a file (multipart field `file`) to Drive and make it public."""
    return await _stage_and_upload(file, "file", "No file uploaded.", folder_id, stage, files)


def _logged_stream(file_id: str, chunks: Iterator[bytes]) -> Iterator[bytes]:
    try:
        yield from chunks
    except DriveGateError as e:
        # Headers and earlier chunks are already on the wire; end with a truncated body.
        logger.error(f"Streaming {file_id} aborted: {e}")


@router.get("/file/metadata/{file_id}", response_model=FileMetadata)
async def get_file_metadata(
    file_id: str = Path(..., description="Drive file ID"),
    files: FileOperations = Depends(get_file_operations),
):
    """Return Drive metadata plus a public direct-download link."""
    meta = await _call("Error retrieving file metadata from Drive.", files.get_metadata, file_id)
    return FileMetadata(**meta)


@router.get("/file/{file_id}")
async def download_file(
    file_id: str = Path(..., description="Drive file ID"),
    files: FileOperations = Depends(get_file_operations),
):
    """Stream a file's content from Drive."""
    meta, chunks = await _call("Error downloading file from Drive.", files.open_download, file_id)
    name = meta.get("name") or file_id
    return StreamingResponse(
        _logged_stream(file_id, chunks),
        media_type=meta.get("mimeType") or "application/octet-stream",
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(name)}"},
    )


@router.put("/file/{file_id}", response_model=StoredFile)
async def update_file(
    file_id: str = Path(..., description="Drive file ID"),
    file: Optional[UploadFile] = File(None),
    stage: TemporaryStage = Depends(get_stage),
    files: FileOperations = Depends(get_file_operations),
):
    """Replace a Drive file's name and content in place."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided for update.")

    staged = await _call(
        "Error staging upload.",
        stage.stage, file.file, file.filename, file.content_type, "file"
    )
    result = await _call("Error updating file in Drive.", files.update, file_id, staged)
    return StoredFile(**result)


@router.delete("/file/{file_id}", response_class=PlainTextResponse)
async def delete_file(
    file_id: str = Path(..., description="Drive file ID"),
    files: FileOperations = Depends(get_file_operations),
):
    deleted = await _call("Error deleting file from Drive.", files.delete, file_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting file from Drive."
        )
    return "File deleted from Drive successfully."


@router.get("/search/{file_name}", response_model=FilesResponse)
async def search_files(
    file_name: str = Path(..., description="Substring to look for in file names"),
    files: FileOperations = Depends(get_file_operations),
):
    results = await _call("Error searching Drive.", files.search, file_name)
    return {"files": results}


@router.get("/files", response_model=FilesResponse)
async def list_files(
    mime_type: Optional[str] = Query(None, alias="mimeType", description="Only list this MIME type"),
    files: FileOperations = Depends(get_file_operations),
):
    """List files. Folders are left out unless `mimeType` asks for them."""
    results = await _call("Error listing files from Drive.", files.list_all, mime_type)
    return {"files": results}


@router.get("/folders", response_model=FoldersResponse)
async def list_folders(folders: FolderOperations = Depends(get_folder_operations)):
    results = await _call("Error listing folders from Drive.", folders.list)
    return {"folders": results}


@router.post("/folder", response_model=StoredFolder)
async def create_folder(
    body: Optional[CreateFolderRequest] = None,
    folders: FolderOperations = Depends(get_folder_operations),
):
    """Create a folder, optionally nested under `parentId`."""
    if body is None or not (body.folderName or "").strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Folder name is required.")

    result = await _call("Error creating folder in Drive.", folders.create, body.folderName, body.parentId)
    return StoredFolder(**result)


@router.delete("/folder/{folder_id}", response_class=PlainTextResponse)
async def delete_folder(
    folder_id: str = Path(..., description="Drive folder ID"),
    folders: FolderOperations = Depends(get_folder_operations),
):
    """Delete a folder. Contents owned by the caller go with it; others are orphaned."""
    deleted = await _call("Error deleting folder from Drive.", folders.delete, folder_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Error deleting folder from Drive."
        )
    return "Folder deleted from Drive successfully."
