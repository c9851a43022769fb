"""
Provisioning Exceptions

Every fatal condition of a provisioning run is raised as a ``ProvisionError``
subclass; the command-line entry point turns them into exit status 1.
"""

from typing import Optional, Sequence


class ProvisionError(Exception):
    """Base class for provisioning failures."""


class PreflightError(ProvisionError):
    """Host does not satisfy a precondition (privilege, OS family)."""


class RoleDetectionError(ProvisionError):
    """Role could not be determined without operator input."""


class ValidationError(ProvisionError):
    """Generated configuration or zone data was rejected by a checker."""


class CommandError(ProvisionError):
    """External command exited with a non-zero status."""

    def __init__(
        self,
        command: Sequence[str],
        returncode: int,
        output: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.command = list(command)
        self.returncode = returncode
        self.output = output or ""
        super().__init__(
            message
            or f"Command '{' '.join(self.command)}' failed with exit status {returncode}"
        )


class ToolNotFoundError(CommandError):
    """External command is not installed."""

    def __init__(self, command: Sequence[str]):
        command = list(command)
        super().__init__(command, 127, message=f"Command not found: {command[0]}")
