"""
Local persistence under DATA_DIR.

Attachments go to DATA_DIR/uploads/, JSON documents from POST /save go to
DATA_DIR itself. Nothing here is ever deleted automatically.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from relaybot.utils.normalize import sanitize_filename

UPLOADS_DIRNAME = "uploads"


@dataclass(frozen=True)
class StoredFile:
    name: str
    path: Path
    size: int


class FileStore:
    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)

    @property
    def uploads_dir(self) -> Path:
        return self.data_dir / UPLOADS_DIRNAME

    def save_attachment(self, original_name: str, content: bytes) -> StoredFile:
        """
        Write attachment bytes under a sanitized name.

        An existing file with the same name is overwritten.

        Raises:
            OSError: directory or file not writable
        """
        name = sanitize_filename(original_name)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        path = self.uploads_dir / name
        path.write_bytes(content)
        return StoredFile(name=name, path=path, size=len(content))

    def save_json(self, filename: str, data: Any) -> Path:
        """
        Write data as pretty JSON to DATA_DIR/<filename>.json.

        Raises:
            OSError: directory or file not writable
            TypeError: data is not JSON serializable
        """
        name = sanitize_filename(filename, default="data")
        if not name.endswith(".json"):
            name = f"{name}.json"

        self.data_dir.mkdir(parents=True, exist_ok=True)
        path = self.data_dir / name
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
        return path
