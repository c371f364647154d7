"""
Media Storage - Uploaded File Handling
======================================

Stores uploaded photos and videos in a single flat directory that the
web app serves at ``/uploads``.

Filenames are never taken from the client:
```
media-<epoch ms>-<random 9 digits><original extension>
```
The original name is kept only in the travel record.
"""

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from fastapi import UploadFile

from travel_diary.core.exceptions import StorageException

logger = logging.getLogger(__name__)

PUBLIC_PREFIX = "/uploads"


@dataclass
class StoredMedia:
    """
    One stored upload.

    Attributes:
        index: 1-based position within the upload request.
        filename: Generated name on disk.
        original_name: Client-supplied filename.
        path: Public URL path (``/uploads/<filename>``).
        size: Size in bytes.
        content_type: MIME type reported by the client.
        file_path: Absolute location on disk.
    """

    index: int
    filename: str
    original_name: str
    path: str
    size: int
    content_type: str
    file_path: Path

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")

    def to_record(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "filename": self.filename,
            "originalName": self.original_name,
            "path": self.path,
            "size": self.size,
            "type": self.content_type,
        }


class MediaStorage:
    """
    Saves and deletes uploaded media files.

    Attributes:
        upload_dir: Directory holding every stored file.
    """

    def __init__(self, upload_dir: Union[str, Path]) -> None:
        self.upload_dir = Path(upload_dir)

        try:
            self.upload_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageException(
                f"Failed to create upload directory: {e}",
                details={"path": str(self.upload_dir)},
            )

    def generate_filename(self, original_name: Optional[str]) -> str:
        ext = Path(original_name or "").suffix.lower()
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 999_999_999)}"
        return f"media-{unique_suffix}{ext}"

    async def save(self, upload: UploadFile, index: int) -> StoredMedia:
        """
        Write an upload to disk.

        Args:
            upload: File received by the request handler.
            index: 1-based position of the file in the request.

        Raises:
            StorageException: If the file cannot be written.
        """
        filename = self.generate_filename(upload.filename)
        file_path = self.upload_dir / filename
        contents = await upload.read()

        try:
            with open(file_path, "wb") as f:
                f.write(contents)
        except OSError as e:
            logger.error(f"Failed to store upload {upload.filename}: {e}")
            raise StorageException(
                "Failed to store uploaded file",
                details={"filename": upload.filename},
            )

        logger.debug(f"Stored {upload.filename} as {filename} ({len(contents)} bytes)")

        return StoredMedia(
            index=index,
            filename=filename,
            original_name=upload.filename or filename,
            path=f"{PUBLIC_PREFIX}/{filename}",
            size=len(contents),
            content_type=upload.content_type or "application/octet-stream",
            file_path=file_path,
        )

    def resolve(self, public_path: str) -> Optional[Path]:
        """Map ``/uploads/<name>`` back to a file inside ``upload_dir``."""
        name = Path(public_path).name
        if not name:
            return None
        return self.upload_dir / name

    def delete(self, public_path: str) -> bool:
        """
        Delete a stored file (best effort).

        Returns:
            True if a file was deleted, False if it was already gone or
            could not be removed.
        """
        file_path = self.resolve(public_path)
        if file_path is None or not file_path.exists():
            logger.warning(f"File not found for deletion: {public_path}")
            return False

        try:
            file_path.unlink()
        except OSError as e:
            logger.warning(f"Failed to delete file {file_path}: {e}")
            return False

        logger.info(f"Deleted file: {file_path}")
        return True
