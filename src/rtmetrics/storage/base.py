"""
Abstract base class for state storage implementations.

The collector keeps its whole history in a single small document. This
interface is what the persistence layer needs from a backend: write a
dictionary, read it back, and inspect the file. Keeping it abstract lets
tests and alternative backends stand in for the JSON file.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict


class StateStorage(ABC):
    """Abstract base class for state storage implementations."""

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: Path) -> None:
        """
        Save dictionary data to the specified path, replacing any previous
        content.

        Args:
            data: JSON-serializable dictionary
            path: File path to save to
        """
        pass

    @abstractmethod
    def load_dict(self, path: Path) -> Any:
        """
        Load data from the specified path.

        Args:
            path: File path to load from

        Returns:
            The decoded document. It is not guaranteed to be a dictionary;
            callers validate the shape.

        Raises:
            FileNotFoundError: If there is no file at ``path``
        """
        pass

    @abstractmethod
    def file_exists(self, path: Path) -> bool:
        pass

    @abstractmethod
    def get_file_size(self, path: Path) -> int:
        """
        Get the size of a file in bytes.

        Returns:
            File size in bytes, 0 if the file does not exist
        """
        pass
