"""Local scratch storage for uploads on their way to Drive."""

import os
import shutil
import logging
import mimetypes
from dataclasses import dataclass
from typing import BinaryIO, Optional
from uuid import uuid4

from .exceptions import StagingError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def detect_content_type(filename: str, declared: Optional[str] = None) -> str:
    """Pick the content type for an upload: the declared one, else a guess from the name."""
    if declared and declared != DEFAULT_CONTENT_TYPE:
        return declared
    guessed, _ = mimetypes.guess_type(filename)
    return guessed or declared or DEFAULT_CONTENT_TYPE


def safe_basename(filename: Optional[str]) -> str:
    """Strip any directory part from a client-supplied filename.

    Raises:
        ValidationError: If nothing usable is left
    """
    name = os.path.basename((filename or "").replace("\\", "/")).strip()
    if not name or name in (".", ".."):
        raise ValidationError("Uploaded file has no usable filename.")
    return name


@dataclass
class StagedUpload:
    """A payload persisted to local scratch space, owned by one request."""

    path: str
    original_name: str
    content_type: str
    size: int

    @property
    def filename(self) -> str:
        """Name of the scratch file on disk (token-original)."""
        return os.path.basename(self.path)

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def discard(self):
        """Delete the scratch file.

        Raises:
            StagingError: If the file cannot be removed
        """
        try:
            os.remove(self.path)
        except OSError as e:
            raise StagingError(f"Could not remove staged file {self.path}: {e}") from e
        logger.debug(f"Discarded staged file {self.path}")


class TemporaryStage:
    """Two scratch directories: one for images, one for everything else.

    Scratch names are `<uuid4 hex>-<original filename>`, so concurrent uploads
    of the same filename never share a path.
    """

    def __init__(self, image_dir: str, upload_dir: str):
        self.image_dir = os.path.abspath(image_dir)
        self.upload_dir = os.path.abspath(upload_dir)
        for directory in (self.image_dir, self.upload_dir):
            os.makedirs(directory, exist_ok=True)

    @classmethod
    def from_config(cls, config: dict) -> "TemporaryStage":
        storage = config.get("storage") or {}
        return cls(storage.get("image_dir", "img"), storage.get("upload_dir", "uploads"))

    def directory_for(self, kind: str) -> str:
        if kind == "image":
            return self.image_dir
        if kind == "file":
            return self.upload_dir
        raise ValueError(f"Unknown upload kind: {kind}")

    def stage(
        self,
        stream: BinaryIO,
        original_name: Optional[str],
        content_type: Optional[str] = None,
        kind: str = "file",
    ) -> StagedUpload:
        """
        Copy an inbound payload into the scratch directory for `kind`.

        Args:
            stream: Readable binary file object with the payload
            original_name: Filename as sent by the client
            content_type: Content type as declared by the client, if any
            kind: 'image' or 'file'

        Returns:
            The StagedUpload describing the scratch file

        Raises:
            ValidationError: If the filename is unusable
            StagingError: If the payload cannot be written
        """
        name = safe_basename(original_name)
        path = os.path.join(self.directory_for(kind), f"{uuid4().hex}-{name}")

        try:
            with open(path, "wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as e:
            raise StagingError(f"Could not write staged file {path}: {e}") from e

        staged = StagedUpload(
            path=path,
            original_name=name,
            content_type=detect_content_type(name, content_type),
            size=os.path.getsize(path),
        )
        logger.info(f"Staged {name} ({staged.size} bytes) at {path}")
        return staged
