"""
Filesystem Operations

Writes generated files and directories with the ownership and permissions
named expects, and keeps the single-generation backup of named.conf.
"""

import shutil
from pathlib import Path
from typing import Optional, Union

from ..provision_logging import get_logger

PathLike = Union[str, Path]

DIRECTORY_MODE = 0o755
ZONE_FILE_MODE = 0o644


def apply_ownership(path: PathLike, owner: Optional[str], group: Optional[str]) -> None:
    """chown ``path``; a None owner and group leaves it untouched."""
    if owner is None and group is None:
        return
    shutil.chown(str(path), user=owner, group=group)


def ensure_directory(
    path: PathLike,
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: int = DIRECTORY_MODE,
) -> Path:
    """Create a directory (with parents) and set its owner and mode."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    apply_ownership(path, owner, group)
    path.chmod(mode)
    return path


def backup_file(source: PathLike, backup: PathLike) -> bool:
    """Copy ``source`` over ``backup``. Returns False when there is no source."""
    source = Path(source)
    if not source.exists():
        get_logger("files").warning(
            "No existing file to back up", path=str(source)
        )
        return False

    shutil.copy2(source, backup)
    get_logger("files").info(
        "Backed up existing configuration", source=str(source), backup=str(backup)
    )
    return True


def read_text(path: PathLike) -> Optional[str]:
    path = Path(path)
    if not path.exists():
        return None
    return path.read_text(encoding="utf-8")


def write_text(
    path: PathLike,
    content: str,
    owner: Optional[str] = None,
    group: Optional[str] = None,
    mode: Optional[int] = None,
) -> Path:
    """Write ``content`` in place, then apply ownership and mode.

    Writing in place keeps the inode, so an existing file keeps its
    permissions when no mode is given.
    """
    path = Path(path)
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)

    apply_ownership(path, owner, group)
    if mode is not None:
        path.chmod(mode)
    return path


def is_unchanged(path: PathLike, content: str) -> bool:
    """Whether ``path`` already holds exactly ``content``."""
    return read_text(path) == content
