"""Filesystem tasks used by the upload/download suites.

The return values are part of the contract suites assert on:
is_file_exist -> True or None, delete_file -> "deleted" / "not found",
clear_downloads -> number of directory entries seen.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import anyio

from e2e_training.env_config import settings

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def is_file_exist(file_path: PathLike) -> Optional[bool]:
    return True if Path(file_path).exists() else None


def delete_file(file_path: PathLike) -> str:
    path = Path(file_path)
    if path.exists():
        path.unlink()
        return "deleted"
    return "not found"


def get_downloaded_files(dir_path: PathLike) -> List[str]:
    path = Path(dir_path)
    if not path.exists():
        return []
    return sorted(entry.name for entry in path.iterdir())


def clear_downloads(dir_path: PathLike) -> int:
    """Delete the files in a directory; subdirectories are left alone."""
    path = Path(dir_path)
    if not path.exists():
        return 0
    entries = list(path.iterdir())
    for entry in entries:
        if entry.is_file():
            entry.unlink()
    return len(entries)


def log_message(message: str) -> None:
    logger.info(message)


def clear_downloads_folder() -> int:
    """Empty the configured downloads folder, creating it when missing."""
    settings.downloads_folder.mkdir(parents=True, exist_ok=True)
    removed = clear_downloads(settings.downloads_folder)
    logger.info("Cleared downloads folder (%d entries)", removed)
    return removed


async def verify_downloaded_file(
    file_name: str,
    downloads_dir: Optional[PathLike] = None,
    timeout: float = 10.0,
    interval: float = 0.25,
) -> Path:
    """Poll until the file exists and is not empty."""
    path = Path(downloads_dir or settings.downloads_folder) / file_name
    deadline = anyio.current_time() + timeout
    while anyio.current_time() <= deadline:
        if path.exists() and path.stat().st_size > 0:
            logger.info("Verified download: %s", path)
            return path
        await anyio.sleep(interval)
    raise AssertionError(f"Downloaded file not found within {timeout}s: {path}")
