"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/file_service.py
Safe removal of files written by treerings. Files go to the system trash, never
permanent erase.
"""
import os
from pathlib import Path
from send2trash import send2trash


class FileService:
    """
    Filesystem helpers used by the backup executor.
    """

    @staticmethod
    def move_to_trash(file_path: str):
        """Moves a file to the system trash."""
        path = Path(file_path).resolve()

        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        try:
            send2trash(str(path))
        except Exception as e:
            raise RuntimeError(f"Failed to move to trash: {e}") from e

    @staticmethod
    def is_contained(relative_path: str) -> bool:
        """True if a root-relative path stays inside its root (no absolute path, no '..' escape)."""
        if os.path.isabs(relative_path):
            return False
        normalized = os.path.normpath(relative_path)
        if normalized in (".", os.pardir):
            return False
        return not normalized.startswith(os.pardir + os.sep)
