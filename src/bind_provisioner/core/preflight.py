"""
Preflight Checks

The provisioner must run as root on a Red Hat family distribution.
"""

import os
from pathlib import Path
from typing import Callable, Sequence

from .exceptions import PreflightError


def check_root(geteuid: Callable[[], int] = os.geteuid) -> None:
    """Raise PreflightError unless running with effective UID 0."""
    if geteuid() != 0:
        raise PreflightError("This script must be run as root")


def check_os(os_release: str, supported: Sequence[str]) -> str:
    """Verify the OS family from os-release.

    Args:
        os_release: Path of the os-release file
        supported: Distribution names, any of which may appear in the file

    Returns:
        The matching distribution name

    Raises:
        PreflightError: If the file is missing or names no supported OS
    """
    path = Path(os_release)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise PreflightError(f"Cannot read {os_release}: {e}") from e

    for name in supported:
        if name in content:
            return name

    raise PreflightError(
        f"This script is designed for {'/'.join(supported)} Linux"
    )
