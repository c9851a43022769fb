"""
Server Role Detection

A host is either the primary (master) or the secondary (slave) of the pair.
The role is derived from the host's primary IPv4 address; when that address
matches neither configured name server the operator is asked, or the run
fails when no operator is available.
"""

import ipaddress
import socket
from enum import Enum
from typing import Callable, Optional

import psutil

from ..config.schema import DeploymentConfig
from ..provision_logging import get_logger
from .exceptions import RoleDetectionError


class Role(Enum):
    """Name-server role of the local host."""

    PRIMARY = "primary"
    SECONDARY = "secondary"

    def __str__(self) -> str:
        return self.value


def detect_role(observed_ip: Optional[str], deployment: DeploymentConfig) -> Optional[Role]:
    """Map the observed address to a role, or None when it matches neither."""
    if observed_ip == deployment.primary_ip:
        return Role.PRIMARY
    if observed_ip == deployment.secondary_ip:
        return Role.SECONDARY
    return None


def prompt_for_role(input_func: Callable[[str], str] = input) -> Role:
    """Ask until the answer is exactly "primary" or "secondary"."""
    answer = input_func("Enter server type (primary/secondary): ")
    while answer not in ("primary", "secondary"):
        answer = input_func("Invalid input. Enter server type (primary/secondary): ")
    return Role(answer)


def discover_host_ip() -> Optional[str]:
    """Return the first non-loopback IPv4 address of the host.

    Interfaces are scanned in the order the kernel reports them, which is the
    order ``hostname -I`` prints its addresses in.
    """
    for addresses in psutil.net_if_addrs().values():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            ip = ipaddress.IPv4Address(address.address)
            if ip.is_loopback or ip.is_link_local:
                continue
            return str(ip)
    return None


def resolve_role(
    deployment: DeploymentConfig,
    observed_ip: Optional[str],
    explicit_role: Optional[str] = None,
    interactive: bool = True,
    input_func: Callable[[str], str] = input,
) -> Role:
    """Determine the role for this run.

    Args:
        deployment: Deployment identity with both name-server addresses
        observed_ip: Primary address of the local host (None if unknown)
        explicit_role: Role given by the operator up front; skips detection
        interactive: Whether the operator can be prompted on a mismatch
        input_func: Prompt function, ``input`` by default

    Returns:
        The resolved role

    Raises:
        RoleDetectionError: Address matches neither server and prompting is disabled
    """
    logger = get_logger("roles")

    if explicit_role is not None:
        role = Role(explicit_role)
        logger.info("Using requested server role", role=str(role))
        return role

    role = detect_role(observed_ip, deployment)
    if role is Role.PRIMARY:
        logger.info(
            f"Detected as PRIMARY DNS server ({deployment.primary_hostname})",
            ip=observed_ip,
        )
        return role
    if role is Role.SECONDARY:
        logger.info(
            f"Detected as SECONDARY DNS server ({deployment.secondary_hostname})",
            ip=observed_ip,
        )
        return role

    logger.warning(
        f"Current IP ({observed_ip}) doesn't match primary ({deployment.primary_ip}) "
        f"or secondary ({deployment.secondary_ip}) IP"
    )
    if not interactive:
        raise RoleDetectionError(
            f"Host address {observed_ip} matches neither name server; "
            "pass --role primary or --role secondary"
        )

    logger.warning("Please specify server type: primary or secondary")
    role = prompt_for_role(input_func)
    logger.info("Using operator-selected server role", role=str(role))
    return role
