"""
named.conf Renderer

Builds the complete server configuration for a role: the fixed options
preamble followed by either the master or the slave zone declarations.
"""

import ipaddress
from typing import Union

from ..config.schema import PathsConfig, ProvisionerConfig
from .roles import Role
from .templates import (
    NAMED_CONF_TEMPLATE,
    PRIMARY_ZONES_TEMPLATE,
    SECONDARY_ZONES_TEMPLATE,
)

REVERSE_SUFFIX = "in-addr.arpa"

NetworkLike = Union[str, ipaddress.IPv4Network]


def _as_network(network: NetworkLike) -> ipaddress.IPv4Network:
    if isinstance(network, ipaddress.IPv4Network):
        return network
    return ipaddress.IPv4Network(network, strict=False)


def reverse_zone_name(network: NetworkLike) -> str:
    """Return the in-addr.arpa zone for an octet-aligned IPv4 network.

    >>> reverse_zone_name("172.30.0.0/24")
    '0.30.172.in-addr.arpa'
    """
    net = _as_network(network)
    if net.prefixlen % 8 or not 8 <= net.prefixlen <= 24:
        raise ValueError(f"Reverse zones need an /8, /16 or /24 network: {net}")

    octets = str(net.network_address).split(".")[: net.prefixlen // 8]
    return ".".join(list(reversed(octets)) + [REVERSE_SUFFIX])


def ptr_owner(ip: str, network: NetworkLike) -> str:
    """Return the PTR owner name of ``ip`` relative to its reverse zone.

    >>> ptr_owner("172.30.0.53", "172.30.0.0/24")
    '53'
    """
    net = _as_network(network)
    address = ipaddress.IPv4Address(ip)
    if address not in net:
        raise ValueError(f"{ip} is not inside {net}")

    host_octets = str(address).split(".")[net.prefixlen // 8 :]
    return ".".join(reversed(host_octets))


def forward_zone_filename(domain: str, paths: PathsConfig) -> str:
    return f"{domain}{paths.forward_zone_suffix}"


def reverse_zone_filename(domain: str, paths: PathsConfig) -> str:
    return f"{domain}{paths.reverse_zone_suffix}"


def render_named_conf(config: ProvisionerConfig, role: Role) -> str:
    """Render the full named.conf text for ``role``.

    Args:
        config: Provisioner configuration
        role: Role of the host the file is written on

    Returns:
        Configuration document text
    """
    deployment = config.deployment
    paths = config.paths
    network = deployment.network

    text = NAMED_CONF_TEMPLATE.format(
        domain=deployment.domain,
        role=role.value,
        backup_conf=paths.backup_conf,
        zone_dir=paths.zone_dir.rstrip("/") or "/",
        secondary_ip=deployment.secondary_ip,
    )

    values = dict(
        domain=deployment.domain,
        network=network,
        reverse_zone=reverse_zone_name(network),
        forward_file=forward_zone_filename(deployment.domain, paths),
        reverse_file=reverse_zone_filename(deployment.domain, paths),
        primary_ip=deployment.primary_ip,
        secondary_ip=deployment.secondary_ip,
        slaves_subdir=paths.slaves_subdir,
    )

    if role is Role.PRIMARY:
        text += PRIMARY_ZONES_TEMPLATE.format(**values)
    else:
        text += SECONDARY_ZONES_TEMPLATE.format(**values)

    return text
