"""Local-disk routes. These never talk to Drive."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Path, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, PlainTextResponse

from drivegate.api.dependencies import get_local_store, get_stage
from drivegate.sdk.exceptions import StagingError
from drivegate.sdk.local import LocalStore
from drivegate.sdk.stage import TemporaryStage

logger = logging.getLogger(__name__)

router = APIRouter()


async def _stage(stage: TemporaryStage, upload: UploadFile, kind: str):
    try:
        return await run_in_threadpool(stage.stage, upload.file, upload.filename, upload.content_type, kind)
    except StagingError as e:
        logger.error(f"Could not stage {upload.filename}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error saving file.")


@router.post("/upload/image", response_class=PlainTextResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    stage: TemporaryStage = Depends(get_stage),
):
    if image is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image uploaded.")
    staged = await _stage(stage, image, "image")
    return f"Image uploaded successfully: {staged.filename}"


@router.post("/upload/file", response_class=PlainTextResponse)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    stage: TemporaryStage = Depends(get_stage),
):
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded.")
    staged = await _stage(stage, file, "file")
    return f"File uploaded successfully: {staged.filename}"


@router.get("/file/{filename}")
async def read_file(
    filename: str = Path(...),
    store: LocalStore = Depends(get_local_store),
):
    return FileResponse(store.read(filename))


@router.put("/file/{filename}", response_class=PlainTextResponse)
async def replace_file(
    filename: str = Path(...),
    file: Optional[UploadFile] = File(None),
    stage: TemporaryStage = Depends(get_stage),
    store: LocalStore = Depends(get_local_store),
):
    """Overwrite an existing local file, keeping its name."""
    if file is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file provided for update.")
    staged = await _stage(stage, file, "file")
    await run_in_threadpool(store.replace, filename, staged)
    return f"File {filename} updated successfully."


@router.delete("/file/{filename}", response_class=PlainTextResponse)
async def delete_file(
    filename: str = Path(...),
    store: LocalStore = Depends(get_local_store),
):
    try:
        await run_in_threadpool(store.delete, filename)
    except StagingError as e:
        logger.error(f"Could not delete {filename}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Error deleting file.")
    return f"File {filename} deleted successfully."
