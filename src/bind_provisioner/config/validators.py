"""
Configuration Validators

This module provides validation functions for provisioning configuration parameters.
"""

import ipaddress
import re
from pathlib import Path
from typing import Dict, List

_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
_DURATION_RE = re.compile(r"^\d+[SMHDWsmhdw]?$")


def validate_ipv4_address(address: str) -> bool:
    """Validate IPv4 address format."""
    if not isinstance(address, str) or not address:
        return False

    try:
        ipaddress.IPv4Address(address)
        return True
    except ValueError:
        return False


def validate_ipv4_list(addresses: List[str]) -> bool:
    """Validate a non-empty list of IPv4 addresses."""
    if not isinstance(addresses, list) or not addresses:
        return False

    return all(validate_ipv4_address(address) for address in addresses)


def validate_label(label: str) -> bool:
    """Validate a single DNS label."""
    return isinstance(label, str) and bool(_LABEL_RE.match(label))


def validate_domain_name(name: str) -> bool:
    """Validate a DNS name (relative or with a trailing dot)."""
    if not isinstance(name, str) or not name:
        return False

    name = name[:-1] if name.endswith(".") else name
    if len(name) > 253:
        return False

    labels = name.split(".")
    if len(labels) < 2:
        return False

    return all(validate_label(label) for label in labels)


def validate_hostname(hostname: str) -> bool:
    """Validate a fully-qualified host name."""
    return validate_domain_name(hostname)


def validate_aliases(aliases: Dict[str, str]) -> bool:
    """Validate alias label to target mapping ("@" targets the apex)."""
    if not isinstance(aliases, dict):
        return False

    for label, target in aliases.items():
        if not validate_label(label):
            return False
        if target != "@" and not validate_label(target) and not validate_domain_name(
            target
        ):
            return False

    return True


def validate_reverse_network(network: str) -> bool:
    """Validate a reverse-lookup network (octet-aligned IPv4 CIDR)."""
    if not isinstance(network, str):
        return False

    try:
        parsed = ipaddress.IPv4Network(network, strict=False)
    except ValueError:
        return False

    return parsed.prefixlen in (8, 16, 24)


def validate_duration(value: str) -> bool:
    """Validate a BIND duration such as 3600, 1D or 3H."""
    return isinstance(value, str) and bool(_DURATION_RE.match(value))


def validate_boolean(value) -> bool:
    """Validate boolean value."""
    return isinstance(value, bool)


def validate_file_path(path: str) -> bool:
    """Validate file path format."""
    if not path:
        return False

    try:
        # Check if path is valid
        Path(path)
        return True
    except (TypeError, ValueError):
        return False


def validate_log_level(level: str) -> bool:
    """Validate log level."""
    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    return isinstance(level, str) and level.upper() in valid_levels


def validate_positive_int(value: int) -> bool:
    """Validate positive integer."""
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def validate_command_name(command: str) -> bool:
    """Validate an executable name or path."""
    return isinstance(command, str) and bool(command) and not any(
        ch.isspace() for ch in command
    )
