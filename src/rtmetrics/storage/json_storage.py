"""
JSON file storage implementation.

Files are written atomically: the document goes to a temporary file in the
same directory, which then replaces the target with ``os.replace``. A crash
mid-write leaves either the old or the new file, never a truncated one.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from .base import StateStorage

logger = logging.getLogger(__name__)


class JsonStateStorage(StateStorage):
    """
    JSON implementation of the StateStorage interface.
    """

    def __init__(self, indent: Any = None):
        """
        Initialize JSON storage.

        Args:
            indent: Passed to ``json.dump``; None writes a compact document
        """
        self.indent = indent

    def save_dict(self, data: Dict[str, Any], path: Path) -> None:
        path = Path(path)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=path.parent,
                prefix=f".{path.name}.",
                suffix=".tmp",
                delete=False,
            ) as f:
                tmp_name = f.name
                json.dump(data, f, indent=self.indent, ensure_ascii=False)
            os.replace(tmp_name, path)
            tmp_name = None
            logger.debug(f"Saved dictionary data to {path}")

        except Exception as e:
            logger.error(f"Failed to save dictionary to {path}: {e}")
            raise
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def load_dict(self, path: Path) -> Any:
        """
        Load and decode a JSON document.

        Raises:
            FileNotFoundError: If the file does not exist
            json.JSONDecodeError: If the file is not valid JSON
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        logger.debug(f"Loaded dictionary data from {path}")
        return data

    def file_exists(self, path: Path) -> bool:
        return Path(path).exists()

    def get_file_size(self, path: Path) -> int:
        try:
            return Path(path).stat().st_size
        except FileNotFoundError:
            return 0
