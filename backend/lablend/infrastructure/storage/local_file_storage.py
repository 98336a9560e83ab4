"""Local filesystem storage for import sources and unit pictures.

Layout under ``upload_dir``::

    imports/<stem>_<YYYYMMDD_HHmmss>_<short>.<ext>   uploaded workbooks
    images/<stem>_<YYYYMMDD_HHmmss>_<short>.<ext>    unit pictures
"""

import logging
import mimetypes
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from uuid import uuid4

logger = logging.getLogger(__name__)

IMPORTS = "imports"
IMAGES = "images"


@dataclass
class StoredFile:
    stored_path: str
    filename: str
    original_name: str
    file_size: int
    mime_type: str


def _sanitise(name: str, max_len: int = 80) -> str:
    return re.sub(r"[^\w\-]", "_", name)[:max_len].strip("_") or "unnamed"


def _stamped_name(filename: str) -> str:
    original = Path(filename)
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    # one import writes many pictures within the same second
    return f"{_sanitise(original.stem)}_{stamp}_{uuid4().hex[:8]}{original.suffix.lower()}"


class LocalFileStorage:
    """Writes uploads under a single root directory."""

    def __init__(self, upload_dir: str):
        self._root = Path(upload_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    async def store_file(self, content: bytes, filename: str, category: str = IMPORTS) -> StoredFile:
        """Write ``content`` to ``<upload_dir>/<category>/`` under a unique name."""
        target_dir = self._root / _sanitise(category)
        target_dir.mkdir(parents=True, exist_ok=True)

        name = _stamped_name(filename)
        destination = target_dir / name
        destination.write_bytes(content)
        logger.info("Stored %s (%d bytes)", destination, len(content))

        return StoredFile(
            stored_path=str(destination),
            filename=name,
            original_name=filename,
            file_size=len(content),
            mime_type=mimetypes.guess_type(filename)[0] or "application/octet-stream",
        )

    async def store_image(self, content: bytes, filename: str) -> StoredFile:
        return await self.store_file(content, filename, category=IMAGES)

    async def delete_file(self, stored_path: str) -> bool:
        """Remove a previously stored file.

        Paths outside the upload root (external image URLs, hand-entered
        references) are left alone and reported as not deleted.
        """
        path = Path(stored_path).resolve()
        if not path.is_relative_to(self._root.resolve()) or not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted stored file %s", path)
        return True
