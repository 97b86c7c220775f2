"""Local-disk file operations that never touch Drive."""

import os
import logging

from .exceptions import LocalFileNotFoundError, StagingError, ValidationError
from .stage import StagedUpload, TemporaryStage

logger = logging.getLogger(__name__)


class LocalStore:
    """Read, replace and delete files kept in the stage directories.

    Lookups check the general upload directory first, then the image directory.
    """

    def __init__(self, stage: TemporaryStage):
        self.stage = stage

    def _search_dirs(self):
        return (self.stage.upload_dir, self.stage.image_dir)

    def resolve(self, filename: str) -> str:
        """
        Find a stored file by name.

        Raises:
            ValidationError: If the name contains a path component
            LocalFileNotFoundError: If no directory holds the file
        """
        if not filename or filename != os.path.basename(filename) or filename in (".", ".."):
            raise ValidationError(f"Invalid filename: {filename!r}")
        if "\\" in filename:
            raise ValidationError(f"Invalid filename: {filename!r}")

        for directory in self._search_dirs():
            candidate = os.path.join(directory, filename)
            if os.path.isfile(candidate):
                return candidate
        raise LocalFileNotFoundError(filename)

    def read(self, filename: str) -> str:
        """Return the path of a stored file."""
        return self.resolve(filename)

    def replace(self, filename: str, staged: StagedUpload) -> str:
        """
        Overwrite a stored file with a freshly staged upload.

        The staged file is discarded when the original does not exist.

        Returns:
            The path of the replaced file
        """
        try:
            target = self.resolve(filename)
        except (LocalFileNotFoundError, ValidationError):
            staged.discard()
            raise

        try:
            os.replace(staged.path, target)
        except OSError as e:
            raise StagingError(f"Could not replace {target}: {e}") from e
        logger.info(f"Replaced local file {target} ({staged.size} bytes)")
        return target

    def delete(self, filename: str):
        """Delete a stored file."""
        target = self.resolve(filename)
        try:
            os.remove(target)
        except FileNotFoundError:
            raise LocalFileNotFoundError(filename)
        except OSError as e:
            raise StagingError(f"Could not delete {target}: {e}") from e
        logger.info(f"Deleted local file {target}")
