"""Local-disk storage for uploaded originals."""

import asyncio
import shutil
from pathlib import Path
from typing import BinaryIO


class LocalFileStorage:
    """Stores each upload as ``<root>/<document_id>/<file_name>``."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    def _write(self, document_id: int, file_name: str, stream: BinaryIO) -> int:
        target_dir = self._root / str(document_id)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / Path(file_name).name

        with target.open("wb") as out:
            shutil.copyfileobj(stream, out)

        return target.stat().st_size

    async def save(self, document_id: int, file_name: str, stream: BinaryIO) -> int:
        """Copy the upload to disk off the event loop."""
        return await asyncio.to_thread(self._write, document_id, file_name, stream)
