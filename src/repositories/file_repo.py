"""
On-disk store for generated files.

Files are written as ``{file_id}-{filename}`` in the generated-files
directory so a later request can attach them to an e-mail by id.
"""

import asyncio
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from src.core.logging import get_logger
from src.core.security import generate_file_id

logger = get_logger(__name__)

_FILE_ID_PATTERN = re.compile(r"^[a-z0-9]+$")


@dataclass(frozen=True)
class GeneratedFile:
    file_id: str
    filename: str
    path: Path

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class GeneratedFileRepository:
    """File-system repository for generated documents."""

    def __init__(self, directory: Union[str, Path]) -> None:
        self.directory = Path(directory)

    def _write(self, path: Path, content: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def save(self, filename: str, content: bytes) -> GeneratedFile:
        """Store ``content`` under a new file id."""
        file_id = generate_file_id()
        path = self.directory / f"{file_id}-{filename}"
        await asyncio.to_thread(self._write, path, content)
        logger.info("Generated file stored", file_id=file_id, filename=filename, size=len(content))
        return GeneratedFile(file_id=file_id, filename=filename, path=path)

    async def get(self, file_id: str) -> Optional[GeneratedFile]:
        """Find a stored file by id, or None."""
        # Ids are base36; anything else could escape the directory
        if not file_id or not _FILE_ID_PATTERN.match(file_id):
            return None
        if not self.directory.is_dir():
            return None

        prefix = f"{file_id}-"
        for path in sorted(self.directory.iterdir()):
            if path.is_file() and path.name.startswith(prefix):
                return GeneratedFile(file_id=file_id, filename=path.name[len(prefix):], path=path)
        return None
