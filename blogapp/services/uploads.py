import logging
import os
import uuid
from typing import Iterable, Protocol

from blogapp.errors import StorageError, ValidationError

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")


class UploadStore(Protocol):
    def store(self, content: bytes, original_name: str) -> str:
        """Persist ``content`` and return an opaque reference to it."""
        ...


class LocalUploadStore:
    """Stores uploads on the local filesystem and returns their public URL."""

    def __init__(self, directory: str, url_prefix: str = "/uploads", allowed_extensions: Iterable[str] = ALLOWED_IMAGE_EXTENSIONS):
        self.directory = directory
        self.url_prefix = url_prefix.rstrip("/")
        self.allowed_extensions = tuple(ext.lower() for ext in allowed_extensions)

    def store(self, content: bytes, original_name: str) -> str:
        if not content:
            raise ValidationError("No file uploaded.")

        file_name = os.path.basename(original_name or "")
        extension = os.path.splitext(file_name)[1].lower()
        if not extension or extension not in self.allowed_extensions:
            raise ValidationError("Invalid file type.", {"file_name": file_name})

        unique_name = f"{uuid.uuid4()}_{file_name}"
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(os.path.join(self.directory, unique_name), "wb") as fh:
                fh.write(content)
        except OSError as e:
            logger.exception("Failed to save upload %s", file_name)
            raise StorageError("An error occurred while saving the file.") from e

        logger.info("Stored upload %s (%d bytes)", unique_name, len(content))
        return f"{self.url_prefix}/{unique_name}"
