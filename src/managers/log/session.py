"""
Session folders and pruning.

Each process run logs into ``<base>/Logs/<stamp>/`` where the stamp is the
local start time, e.g. ``2025-09-16_10-42-03``.
"""

import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union


SESSION_STAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"
LOGS_DIR_NAME = "Logs"

logger = logging.getLogger(__name__)


class LogSessionError(OSError):
    """The session folder could not be created; nothing can be logged."""


@dataclass(frozen=True)
class LogSession:
    stamp: str
    logs_root: Path
    folder_path: Path

    @classmethod
    def start(cls, base_path: Union[str, Path], now: Optional[datetime] = None) -> "LogSession":
        """
        Create the log root and this run's session folder.

        Args:
            base_path: Application-defined writable directory
            now: Session start time, defaults to the current local time

        Returns:
            LogSession: The created session

        Raises:
            LogSessionError: If either directory cannot be created
        """
        stamp = (now or datetime.now()).strftime(SESSION_STAMP_FORMAT)
        logs_root = Path(base_path).absolute() / LOGS_DIR_NAME
        folder_path = logs_root / stamp

        try:
            logs_root.mkdir(parents=True, exist_ok=True)
            folder_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise LogSessionError(f"Failed to create session folder '{folder_path}': {e}") from e

        return cls(stamp=stamp, logs_root=logs_root, folder_path=folder_path)


def _creation_time(path: Path) -> float:
    stat = path.stat()
    # st_birthtime is missing on most Linux filesystems
    return getattr(stat, "st_birthtime", stat.st_ctime)


def _same_path(a: Path, b: Path) -> bool:
    return os.path.normcase(str(a.absolute())) == os.path.normcase(str(b.absolute()))


def prune_old_sessions(
    logs_root: Union[str, Path],
    active_folder: Union[str, Path],
    keep_newest: int = 5,
    console: Optional[Any] = None,
) -> List[Path]:
    """
    Keep only the newest session folders and delete the rest.

    The active session folder is never deleted, whatever its rank.
    Failures are reported as a console warning and never raised.

    Args:
        logs_root: Directory holding the session folders
        active_folder: Folder of the running session
        keep_newest: Number of folders to keep, counted newest first
        console: Sink with a ``warning`` method for failure reports,
            defaults to this module's logger

    Returns:
        List[Path]: Folders that were deleted
    """
    deleted: List[Path] = []
    try:
        if keep_newest < 1:
            return deleted
        root = Path(logs_root)
        if not root.is_dir():
            return deleted

        dirs = [entry for entry in root.iterdir() if entry.is_dir()]
        dirs.sort(key=_creation_time, reverse=True)

        for folder in dirs[keep_newest:]:
            if _same_path(folder, Path(active_folder)):
                continue
            shutil.rmtree(folder)
            deleted.append(folder)
    except Exception as e:
        (console or logger).warning(f"Failed to prune old sessions: {e}")
    return deleted
