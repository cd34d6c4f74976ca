"""
Module: export.file_locking

Purpose:
    Cross-platform file locking for collection manifests, which several
    exports (possibly in different processes) may extend at once.
    Uses portalocker for Mac, Windows, and Linux compatibility.

Key Functions:
    - locked_file: Context manager for locked file access
    - locked_read_modify_write_json: Read-modify-write JSON with lock

Dependencies:
    - portalocker: Cross-platform file locking

Used By:
    - export.gallery: Collection manifest updates
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Generator, Optional

import portalocker

logger = logging.getLogger(__name__)


@contextmanager
def locked_file(
    path: Path,
    mode: str = 'r',
    lock_type: int = portalocker.LOCK_SH,
) -> Generator:
    """
    Context manager for cross-platform locked file access.

    Args:
        path: Path to file.
        mode: File open mode ('r', 'w', 'a', etc.).
        lock_type: Lock type (LOCK_EX for exclusive, LOCK_SH for shared).

    Yields:
        Open file handle with lock held.

    Example:
        >>> with locked_file(manifest_path) as f:
        ...     data = json.load(f)
    """
    with open(path, mode, encoding='utf-8') as f:
        portalocker.lock(f, lock_type)
        try:
            yield f
        finally:
            portalocker.unlock(f)


def locked_read_json(path: Path) -> Optional[Dict[str, Any]]:
    """Read a JSON file under a shared lock; None if it does not exist."""
    if not path.exists():
        return None
    with locked_file(path, 'r', portalocker.LOCK_SH) as f:
        content = f.read()
    return json.loads(content) if content.strip() else None


def locked_read_modify_write_json(
    path: Path,
    modifier: Callable[[Dict[str, Any]], Dict[str, Any]],
    default: Callable[[], Dict[str, Any]] = dict,
) -> Dict[str, Any]:
    """
    Read JSON, apply modifier, write back - all with exclusive lock.

    The file is created empty first if missing, so two processes
    creating the same manifest serialise on the lock and the second one
    sees the first one's data.

    Args:
        path: Path to JSON file.
        modifier: Function that takes existing data, returns modified data.
        default: Factory for data when the file is new or empty.

    Returns:
        The modified data that was written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    # 'a+' creates without truncating an existing manifest
    with open(path, 'a+', encoding='utf-8') as f:
        portalocker.lock(f, portalocker.LOCK_EX)
        try:
            f.seek(0)
            content = f.read()
            existing = json.loads(content) if content.strip() else default()

            modified = modifier(existing)

            f.seek(0)
            f.truncate()
            json.dump(modified, f, indent=2, ensure_ascii=False)
            f.flush()

            return modified
        finally:
            portalocker.unlock(f)
