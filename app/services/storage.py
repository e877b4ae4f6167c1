"""Local disk storage for uploaded PDFs."""

import asyncio
import logging
from pathlib import Path

from app.config import settings

logger = logging.getLogger(__name__)


class LocalFileStorage:
    """Store uploaded files flat inside a single upload directory."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root or settings.upload_dir)

    def path_for(self, filename: str) -> Path:
        """Resolve a stored filename, rejecting anything that is not a bare name."""
        if not filename or Path(filename).name != filename or filename in (".", ".."):
            raise ValueError(f"Invalid filename: {filename!r}")
        return self.root / filename

    async def save(self, filename: str, content: bytes) -> Path:
        path = self.path_for(filename)

        def _write() -> None:
            self.root.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        await asyncio.to_thread(_write)
        return path

    async def read(self, filename: str) -> bytes:
        return await asyncio.to_thread(self.path_for(filename).read_bytes)

    async def delete(self, filename: str) -> None:
        """Delete a stored file. A missing file is logged, not raised."""
        path = self.path_for(filename)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            logger.warning(f"Failed to delete stored file, not found: {filename}")
