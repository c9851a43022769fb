"""
Host System Interface

The provisioner never calls the package manager, the service manager or the
BIND checkers directly; it goes through a ``HostSystem``. The subprocess
implementation below is what runs on a real host; tests supply their own.
"""

import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..config.schema import ServiceConfig
from ..provision_logging import get_logger
from .exceptions import CommandError, ToolNotFoundError


class HostSystem(ABC):
    """Capabilities the provisioner needs from the host."""

    @abstractmethod
    def update_packages(self) -> None:
        """Update all installed packages."""

    @abstractmethod
    def install_packages(self, packages: Sequence[str]) -> None:
        """Install the given packages."""

    @abstractmethod
    def enable_service(self, service: str) -> None:
        """Enable a service at boot."""

    @abstractmethod
    def restart_service(self, service: str) -> None:
        """Restart a service."""

    @abstractmethod
    def service_status(self, service: str) -> str:
        """Return the human-readable status report of a service."""

    @abstractmethod
    def check_config(self, config_path: str) -> str:
        """Syntax-check a named.conf; raises CommandError on rejection."""

    @abstractmethod
    def check_zone(self, zone: str, zone_path: str) -> str:
        """Syntax-check a zone file; raises CommandError on rejection."""


class SubprocessHostSystem(HostSystem):
    """HostSystem backed by yum, systemctl and the named-check* tools."""

    def __init__(self, service_config: ServiceConfig):
        self.config = service_config
        self.logger = get_logger("system")

    def _run(self, command: List[str], capture: bool = True) -> str:
        """Run a command and wait for it.

        Args:
            command: Argument vector
            capture: Capture stdout/stderr instead of passing them through

        Returns:
            Captured output (empty when not capturing)

        Raises:
            ToolNotFoundError: If the executable does not exist
            CommandError: If the command exits non-zero
        """
        self.logger.debug("Running command", command=" ".join(command))

        try:
            result = subprocess.run(
                command,
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolNotFoundError(command) from e

        output = ""
        if capture:
            output = (result.stdout or "") + (result.stderr or "")

        if result.returncode != 0:
            raise CommandError(command, result.returncode, output)

        return output

    def update_packages(self) -> None:
        self._run([self.config.package_manager, "update", "-y"], capture=False)

    def install_packages(self, packages: Sequence[str]) -> None:
        self._run(
            [self.config.package_manager, "install", "-y", *packages], capture=False
        )

    def enable_service(self, service: str) -> None:
        self._run([self.config.service_manager, "enable", service])

    def restart_service(self, service: str) -> None:
        self._run([self.config.service_manager, "restart", service])

    def service_status(self, service: str) -> str:
        return self._run(
            [self.config.service_manager, "status", service, "--no-pager", "-l"]
        )

    def check_config(self, config_path: str) -> str:
        return self._run([self.config.checkconf_command, config_path])

    def check_zone(self, zone: str, zone_path: str) -> str:
        return self._run([self.config.checkzone_command, zone, zone_path])


def describe_failure(error: CommandError, limit: Optional[int] = 20) -> str:
    """Last lines of a failed command's output, for log messages."""
    lines = [line for line in error.output.splitlines() if line.strip()]
    if limit is not None:
        lines = lines[-limit:]
    return "\n".join(lines)
