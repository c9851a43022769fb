"""
Zone File Renderer

Generates the forward and reverse zone files served by the primary, and the
SOA serial numbers stamped into them.

Serials have the form ``YYYYMMDDnn``. With the ``date`` policy every run
emits ``nn = 01``; with the ``increment`` policy the serial already on disk is
read back and bumped so regenerations on the same day still increase.
"""

from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Iterable, List, Optional, Union

import dns.exception
import dns.rdatatype
import dns.zone

from ..config.schema import DeploymentConfig, ZoneConfig
from ..provision_logging import get_logger
from .renderer import ptr_owner, reverse_zone_name
from .templates import SOA_TEMPLATE

SERIAL_SUFFIX = "01"


@dataclass
class RenderedZones:
    """Forward and reverse zone text sharing one serial."""

    forward: str
    reverse: str
    serial: int


def date_serial(today: date) -> int:
    """Serial for ``today`` with the fixed daily suffix."""
    return int(today.strftime("%Y%m%d") + SERIAL_SUFFIX)


def next_serial(today: date, previous: Optional[int] = None) -> int:
    """Return a serial strictly greater than ``previous``.

    >>> next_serial(date(2024, 5, 1), None)
    2024050101
    >>> next_serial(date(2024, 5, 1), 2024050101)
    2024050102
    >>> next_serial(date(2024, 5, 2), 2024050107)
    2024050201
    """
    base = date_serial(today)
    if previous is None or previous < base:
        return base
    return previous + 1


def read_serial(path: Union[str, Path], origin: str) -> Optional[int]:
    """Read the SOA serial of an existing zone file, None if there is none."""
    path = Path(path)
    if not path.exists():
        return None

    try:
        zone = dns.zone.from_file(
            str(path), origin=_absolute(origin), relativize=True, check_origin=False
        )
        rdataset = zone.get_rdataset("@", dns.rdatatype.SOA)
    except (OSError, UnicodeDecodeError, dns.exception.DNSException) as e:
        get_logger("zones").warning(
            "Could not read serial from existing zone file", path=str(path), error=str(e)
        )
        return None

    if not rdataset:
        return None
    return int(rdataset[0].serial)


def choose_serial(
    zone_config: ZoneConfig,
    today: date,
    existing: Iterable[Optional[int]] = (),
) -> int:
    """Pick the serial for this run according to the configured policy."""
    if zone_config.serial_policy == "date":
        return date_serial(today)

    known = [serial for serial in existing if serial is not None]
    return next_serial(today, max(known) if known else None)


def _absolute(name: str) -> str:
    return name if name.endswith(".") else f"{name}."


def _soa_header(deployment: DeploymentConfig, zone_config: ZoneConfig, serial: int) -> str:
    return SOA_TEMPLATE.format(
        ttl=zone_config.ttl,
        primary_ns=deployment.primary_hostname.rstrip("."),
        secondary_ns=deployment.secondary_hostname.rstrip("."),
        mailbox=deployment.mailbox,
        serial=serial,
        refresh=zone_config.refresh,
        retry=zone_config.retry,
        expire=zone_config.expire,
        minimum=zone_config.minimum,
    )


def _alias_target(target: str) -> str:
    if target == "@" or "." not in target:
        return target
    return _absolute(target)


def render_forward_zone(
    deployment: DeploymentConfig, zone_config: ZoneConfig, serial: int
) -> str:
    """Render the forward zone: SOA, NS, glue, service and alias records."""
    lines: List[str] = [_soa_header(deployment, zone_config, serial).rstrip("\n")]

    for hostname, ip in (
        (deployment.primary_hostname, deployment.primary_ip),
        (deployment.secondary_hostname, deployment.secondary_ip),
    ):
        lines.append(f"{_absolute(hostname.rstrip('.')):<24}IN A    {ip}")

    lines.append("")
    lines.append(f"; A records for {deployment.service_name} service")
    for address in deployment.service_addresses:
        lines.append(f"{deployment.service_name:<24}IN A    {address}")

    if deployment.aliases:
        lines.append("")
        lines.append("; Aliases")
        for label, target in deployment.aliases.items():
            lines.append(f"{label:<24}IN CNAME {_alias_target(target)}")

    return "\n".join(lines) + "\n"


def render_reverse_zone(
    deployment: DeploymentConfig, zone_config: ZoneConfig, serial: int
) -> str:
    """Render the reverse zone: SOA, NS and one PTR per name server."""
    network = deployment.network
    lines: List[str] = [_soa_header(deployment, zone_config, serial).rstrip("\n")]

    for hostname, ip in (
        (deployment.primary_hostname, deployment.primary_ip),
        (deployment.secondary_hostname, deployment.secondary_ip),
    ):
        owner = ptr_owner(ip, network)
        lines.append(f"{owner:<8}IN PTR  {_absolute(hostname.rstrip('.'))}")

    return "\n".join(lines) + "\n"


def render_zones(
    deployment: DeploymentConfig, zone_config: ZoneConfig, serial: int
) -> RenderedZones:
    """Render both zone files with the same serial."""
    return RenderedZones(
        forward=render_forward_zone(deployment, zone_config, serial),
        reverse=render_reverse_zone(deployment, zone_config, serial),
        serial=serial,
    )


def reverse_origin(deployment: DeploymentConfig) -> str:
    """Origin of the reverse zone for ``deployment``."""
    return reverse_zone_name(deployment.network)
