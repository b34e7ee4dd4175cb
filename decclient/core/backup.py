from __future__ import annotations

import itertools
import logging
import shutil
from pathlib import Path

from decclient.core.errors import LocalIOError

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bkp"


def next_backup_path(path: Path) -> Path:
    """Return the first unused name among ``path.bkp``, ``path.bkp2``, ``path.bkp3`` ..."""

    candidate = path.with_name(path.name + BACKUP_SUFFIX)
    if not candidate.exists():
        return candidate
    for index in itertools.count(2):
        candidate = path.with_name(f"{path.name}{BACKUP_SUFFIX}{index}")
        if not candidate.exists():
            return candidate
    raise AssertionError("unreachable")  # pragma: no cover


def backup_file(path: Path) -> Path | None:
    """Copy ``path`` next to itself under a fresh backup name.

    Returns ``None`` when there is nothing to back up. Existing backups are
    never overwritten.
    """

    if not path.exists():
        return None
    target = next_backup_path(path)
    try:
        shutil.copy2(path, target)
    except OSError as exc:
        raise LocalIOError(f"failed to back up {path.name}: {exc}", path=path) from exc
    logger.debug("Backed up %s to %s", path, target)
    return target


def write_artifact(path: Path, content: bytes) -> Path | None:
    """Back up ``path`` and then overwrite it with ``content``.

    A failed backup aborts before the destination is touched.
    """

    backup = backup_file(path)
    try:
        path.write_bytes(content)
    except OSError as exc:
        raise LocalIOError(f"failed to write {path.name}: {exc}", path=path) from exc
    return backup
