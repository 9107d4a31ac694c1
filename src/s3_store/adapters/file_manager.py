"""
Folder organizers that place each item's files in their own folder.

``FileManager`` works on a local files directory. ``S3FileManager`` keeps the
same interface for a bucket, where folders are only key prefixes: creating or
removing them is a no-op and moving a file goes through ``S3Store.move``.
"""

import logging
import os
import shutil
from typing import List, Optional

from s3_store.adapters.storage import S3Store
from s3_store.errors import StoreError
from s3_store.results import StoreResult

logger = logging.getLogger(__name__)

ORIGINAL_FOLDER = "original"


class MoveError(StoreError):
    """A file could not be moved into its item folder."""


class FileManager:
    """Organizes stored files into per-item folders on local disk."""

    def __init__(self, base_path: str, derivative_types: Optional[List[str]] = None):
        self.base_path = base_path
        self.derivative_types = list(derivative_types or [])

    @staticmethod
    def concat_with_separator(base: str, path: str) -> str:
        """Join two path parts with exactly one "/" between them."""
        if not base:
            return path or ""
        if not path:
            return base
        return base.rstrip("/") + "/" + path.lstrip("/")

    def folder_types(self) -> List[str]:
        return [ORIGINAL_FOLDER] + self.derivative_types

    def create_folder(self, path: str) -> bool:
        if not path:
            return True
        os.makedirs(path, exist_ok=True)
        return True

    def create_folders(self, archive_folder: str) -> bool:
        """Create the item folder under the original and every derivative type."""
        if not archive_folder:
            return True
        for folder_type in self.folder_types():
            folder = self.concat_with_separator(self.concat_with_separator(self.base_path, folder_type), archive_folder)
            self.create_folder(folder)
        return True

    def remove_folders(self, archive_folder: str) -> bool:
        """Remove the item folder and its emptied parents, stopping at the type folder."""
        if not archive_folder:
            return True
        for folder_type in self.folder_types():
            root = self.concat_with_separator(self.base_path, folder_type)
            folder = self.concat_with_separator(root, archive_folder)
            while folder.rstrip("/") != root.rstrip("/") and os.path.isdir(folder) and not os.listdir(folder):
                os.rmdir(folder)
                folder = os.path.dirname(folder.rstrip("/"))
        return True

    def _move_error(self, source: str, destination: str, path: str, reason: str = "") -> StoreResult[str]:
        msg = f'Error during move of a file from "{source}" to "{destination}" (local dir: "{path}")'
        msg = f"{msg}: {reason}." if reason else f"{msg}."
        logger.error(msg)
        return StoreResult.failure(MoveError(msg))

    def move_file(self, source: str, destination: str, path: str = "") -> StoreResult[str]:
        """
        Move a file inside the files directory.

        An existing destination means the move already happened. Returns the
        full destination on success and a failure result otherwise.
        """
        real_source = self.concat_with_separator(path, source)
        real_destination = self.concat_with_separator(path, destination)
        if os.path.exists(real_destination):
            return StoreResult.success(real_destination)

        if not os.path.exists(real_source):
            return self._move_error(source, destination, path, "source does not exist")

        try:
            self.create_folder(os.path.dirname(real_destination))
            shutil.move(real_source, real_destination)
        except OSError as e:
            logger.debug(f"Local move failed: {e}")
            return self._move_error(source, destination, path)

        return StoreResult.success(real_destination)


class S3FileManager(FileManager):
    """Folder organizer for a bucket, where folders exist only as key prefixes."""

    def __init__(self, store: S3Store, derivative_types: Optional[List[str]] = None):
        super().__init__(store.storage_path(), derivative_types)
        self.store = store

    def create_folder(self, path: str) -> bool:
        # Prefixes appear when an object is written under them.
        return True

    def create_folders(self, archive_folder: str) -> bool:
        return True

    def remove_folders(self, archive_folder: str) -> bool:
        # Objects are removed one by one or with S3Store.delete_dir.
        return True

    def move_file(self, source: str, destination: str, path: str = "") -> StoreResult[str]:
        real_source = self.concat_with_separator(path, source)
        real_destination = self.concat_with_separator(path, destination)

        try:
            if self.store.exists(real_destination):
                return StoreResult.success(real_destination)

            if not self.store.exists(real_source):
                return self._move_error(source, destination, path, "source does not exist")

            self.store.move(real_source, real_destination)
        except StoreError as e:
            logger.debug(f"Bucket move failed: {e}")
            return self._move_error(source, destination, path, str(e))

        return StoreResult.success(real_destination)
