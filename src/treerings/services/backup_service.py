"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/backup_service.py
Copies files reported as missing into the baseline root.
Existing files are never overwritten: a taken name gets a numeric suffix before its
extension (photo.jpg -> photo-1.jpg -> photo-2.jpg ...). Each file succeeds or fails
independently.
"""
import os
import shutil
import logging
from typing import List, Optional, Set, BinaryIO, Tuple

from treerings.core.models import Analysis, BackupResult, BackupStatus
from treerings.services.file_service import FileService

logger = logging.getLogger(__name__)


class BackupService:
    BUFFER_SIZE = 1024 * 1024

    @staticmethod
    def backup_missing(analysis: Analysis, dry_run: bool = False) -> List[BackupResult]:
        """
        Copies every missing file of the analysis into the first tree's root.

        Args:
            analysis: Reconciliation result; trees[0] is the destination
            dry_run: Only compute destinations, write nothing

        Returns:
            One BackupResult per missing file, in the order they were processed.
        """
        if not analysis.missing:
            return []
        if analysis.baseline is None:
            raise ValueError("Analysis has missing files but no baseline tree")

        baseline_root = analysis.baseline.root
        logger.info(f"Backing up {analysis.missing_count} missing files to {baseline_root}")

        results = []
        planned = set()  # destinations promised to earlier files of a dry run
        for root, paths in analysis.missing.items():
            for relative_path in paths:
                results.append(
                    BackupService.backup_file(baseline_root, root, relative_path,
                                              dry_run=dry_run, planned=planned)
                )
        return results

    @staticmethod
    def backup_file(dst_root: str,
                    src_root: str,
                    relative_path: str,
                    dry_run: bool = False,
                    planned: Optional[Set[str]] = None) -> BackupResult:
        """
        Copies `src_root/relative_path` to `dst_root/relative_path` (or a suffixed free name).
        In a dry run, names in `planned` count as taken and the chosen name is added to it.
        """
        src_path = os.path.join(src_root, relative_path)

        if not FileService.is_contained(relative_path):
            logger.warning(f"Not backing up {src_path}: path is outside of {src_root}")
            return BackupResult(src_path, None, BackupStatus.SKIPPED, "path escapes its tree root")

        if dry_run:
            try:
                dst_path = BackupService.find_free_destination(dst_root, relative_path, taken=planned)
            except OSError as e:
                return BackupService._failed(src_path, None, e)
            if planned is not None:
                planned.add(dst_path)
            return BackupResult(src_path, dst_path, BackupStatus.PLANNED)

        try:
            src = open(src_path, 'rb')
        except OSError as e:
            return BackupService._failed(src_path, None, e)

        with src:
            try:
                dst, dst_path = BackupService._claim_destination(dst_root, relative_path)
            except OSError as e:
                return BackupService._failed(src_path, None, e)

            logger.info(f"cp {src_path}\n  to: {dst_path} ...")
            try:
                with dst:
                    shutil.copyfileobj(src, dst, length=BackupService.BUFFER_SIZE)
            except OSError as e:
                BackupService._discard_partial(dst_path)
                return BackupService._failed(src_path, dst_path, e)

        try:
            shutil.copystat(src_path, dst_path)
        except OSError as e:
            logger.warning(f"Copied {dst_path} but could not preserve timestamps: {e}")

        return BackupResult(src_path, dst_path, BackupStatus.COPIED)

    @staticmethod
    def suffixed_path(relative_path: str, index: int) -> str:
        """dir/name.ext -> dir/name-<index>.ext"""
        base, ext = os.path.splitext(relative_path)
        return f"{base}-{index}{ext}"

    @staticmethod
    def find_free_destination(dst_root: str, relative_path: str, taken: Optional[Set[str]] = None) -> str:
        """
        First of dst_root/relative_path, name-1.ext, name-2.ext, ... that does not exist yet
        and is not in `taken`.
        """
        taken = taken or set()
        dst_path = os.path.join(dst_root, relative_path)
        index = 0
        while dst_path in taken or os.path.lexists(dst_path):
            index += 1
            dst_path = os.path.join(dst_root, BackupService.suffixed_path(relative_path, index))
        return dst_path

    @staticmethod
    def _claim_destination(dst_root: str, relative_path: str) -> Tuple[BinaryIO, str]:
        """
        Creates the first free destination exclusively and returns it open for writing.
        Exclusive creation means two concurrent backups can never claim the same name.
        """
        parent = os.path.dirname(os.path.join(dst_root, relative_path))
        os.makedirs(parent, mode=0o775, exist_ok=True)

        index = 0
        while True:
            candidate = relative_path if index == 0 else BackupService.suffixed_path(relative_path, index)
            dst_path = os.path.join(dst_root, candidate)
            try:
                return open(dst_path, 'xb'), dst_path
            except FileExistsError:
                index += 1

    @staticmethod
    def _discard_partial(dst_path: str) -> None:
        # Only called for a file this service created itself
        try:
            FileService.move_to_trash(dst_path)
            logger.info(f"Moved partial copy {dst_path} to trash")
        except (RuntimeError, OSError) as e:
            logger.warning(f"Partial copy left at {dst_path}: {e}")

    @staticmethod
    def _failed(src_path: str, dst_path: Optional[str], error: Exception) -> BackupResult:
        logger.error(f"Couldn't backup {src_path}: {error}")
        return BackupResult(src_path, dst_path, BackupStatus.FAILED, str(error))
