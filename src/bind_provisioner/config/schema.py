"""
Provisioner Configuration Schema

Configuration schema covering the deployment identity, zone timers, filesystem
layout, service control and logging settings of a BIND primary/secondary pair.
"""

import ipaddress
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .validators import (
    validate_aliases,
    validate_boolean,
    validate_command_name,
    validate_domain_name,
    validate_duration,
    validate_file_path,
    validate_hostname,
    validate_ipv4_address,
    validate_ipv4_list,
    validate_label,
    validate_log_level,
    validate_positive_int,
    validate_reverse_network,
)

ROLE_NAMES = ("primary", "secondary")
SERIAL_POLICIES = ("increment", "date")


@dataclass
class DeploymentConfig:
    """Deployment identity: the domain and the two name servers serving it."""

    domain: str = "local.mydomainz.id"
    primary_hostname: str = "ns1.local.mydomainz.id"
    primary_ip: str = "172.30.0.53"
    secondary_hostname: str = "ns2.local.mydomainz.id"
    secondary_ip: str = "172.30.0.56"
    service_name: str = "app-test"
    service_addresses: List[str] = field(
        default_factory=lambda: ["172.30.0.52", "172.30.0.53", "172.30.0.54"]
    )
    aliases: Dict[str, str] = field(default_factory=lambda: {"www": "@"})
    reverse_network: Optional[str] = None
    admin_mailbox: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate deployment configuration."""
        if not validate_domain_name(self.domain):
            raise ValueError(f"Invalid domain name: {self.domain}")

        if not validate_hostname(self.primary_hostname):
            raise ValueError(f"Invalid primary hostname: {self.primary_hostname}")

        if not validate_hostname(self.secondary_hostname):
            raise ValueError(
                f"Invalid secondary hostname: {self.secondary_hostname}"
            )

        if not validate_ipv4_address(self.primary_ip):
            raise ValueError(f"Invalid primary IP address: {self.primary_ip}")

        if not validate_ipv4_address(self.secondary_ip):
            raise ValueError(f"Invalid secondary IP address: {self.secondary_ip}")

        # Hostnames and addresses map 1:1
        if self.primary_hostname.rstrip(".") == self.secondary_hostname.rstrip("."):
            raise ValueError("Primary and secondary hostnames must differ")

        if self.primary_ip == self.secondary_ip:
            raise ValueError("Primary and secondary IP addresses must differ")

        if not validate_label(self.service_name):
            raise ValueError(f"Invalid service name: {self.service_name}")

        if not validate_ipv4_list(self.service_addresses):
            raise ValueError(f"Invalid service addresses: {self.service_addresses}")

        if not validate_aliases(self.aliases):
            raise ValueError(f"Invalid aliases: {self.aliases}")

        if self.reverse_network is not None and not validate_reverse_network(
            self.reverse_network
        ):
            raise ValueError(
                f"Reverse network must be an IPv4 /8, /16 or /24: {self.reverse_network}"
            )

        if self.admin_mailbox is not None and not validate_domain_name(
            self.admin_mailbox
        ):
            raise ValueError(f"Invalid admin mailbox: {self.admin_mailbox}")

        network = self.network
        for name, address in (
            ("Primary", self.primary_ip),
            ("Secondary", self.secondary_ip),
        ):
            if ipaddress.IPv4Address(address) not in network:
                raise ValueError(
                    f"{name} IP {address} is outside reverse network {network}"
                )

    @property
    def network(self) -> ipaddress.IPv4Network:
        """Network the reverse zone is derived from."""
        if self.reverse_network:
            return ipaddress.IPv4Network(self.reverse_network, strict=False)
        return ipaddress.IPv4Network(f"{self.primary_ip}/24", strict=False)

    @property
    def mailbox(self) -> str:
        """SOA responsible-person mailbox in domain-name form."""
        return (self.admin_mailbox or f"admin.{self.domain}").rstrip(".")


@dataclass
class ZoneConfig:
    """SOA timers and serial-number policy for generated zones."""

    ttl: str = "1D"
    refresh: str = "1D"
    retry: str = "1H"
    expire: str = "1W"
    minimum: str = "3H"
    serial_policy: str = "increment"

    def __post_init__(self) -> None:
        """Validate zone configuration."""
        for name in ("ttl", "refresh", "retry", "expire", "minimum"):
            value = getattr(self, name)
            if not validate_duration(value):
                raise ValueError(f"Invalid {name} duration: {value}")

        if self.serial_policy not in SERIAL_POLICIES:
            raise ValueError(f"Invalid serial policy: {self.serial_policy}")


@dataclass
class PathsConfig:
    """Filesystem locations used by named."""

    named_conf: str = "/etc/named.conf"
    backup_conf: str = "/etc/named.conf.backup"
    zone_dir: str = "/var/named"
    slaves_subdir: str = "slaves"
    forward_zone_suffix: str = ".zone"
    reverse_zone_suffix: str = ".rev"

    def __post_init__(self) -> None:
        """Validate paths configuration."""
        for name in ("named_conf", "backup_conf", "zone_dir", "slaves_subdir"):
            value = getattr(self, name)
            if not validate_file_path(value):
                raise ValueError(f"Invalid {name} path: {value}")

        if self.named_conf == self.backup_conf:
            raise ValueError("Backup path cannot be the configuration path")

        if "/" in self.slaves_subdir:
            raise ValueError(
                f"Slaves subdirectory must be a single name: {self.slaves_subdir}"
            )

        if not self.forward_zone_suffix or not self.reverse_zone_suffix:
            raise ValueError("Zone file suffixes cannot be empty")

        if self.forward_zone_suffix == self.reverse_zone_suffix:
            raise ValueError("Forward and reverse zone suffixes must differ")


@dataclass
class ServiceConfig:
    """Package, service account and external tool settings."""

    packages: List[str] = field(default_factory=lambda: ["bind", "bind-utils"])
    service_name: str = "named"
    owner: Optional[str] = "named"
    group: Optional[str] = "named"
    update_system: bool = True
    package_manager: str = "yum"
    service_manager: str = "systemctl"
    checkconf_command: str = "named-checkconf"
    checkzone_command: str = "named-checkzone"
    supported_os: List[str] = field(
        default_factory=lambda: ["CentOS", "Red Hat", "Rocky"]
    )
    os_release: str = "/etc/os-release"

    def __post_init__(self) -> None:
        """Validate service configuration."""
        if not isinstance(self.packages, list) or not self.packages:
            raise ValueError(f"At least one package is required: {self.packages}")

        if not validate_command_name(self.service_name):
            raise ValueError(f"Invalid service name: {self.service_name}")

        if not validate_boolean(self.update_system):
            raise ValueError(f"Update system must be boolean: {self.update_system}")

        for name in (
            "package_manager",
            "service_manager",
            "checkconf_command",
            "checkzone_command",
        ):
            value = getattr(self, name)
            if not validate_command_name(value):
                raise ValueError(f"Invalid {name}: {value}")

        if not isinstance(self.supported_os, list) or not self.supported_os:
            raise ValueError(f"Supported OS list cannot be empty: {self.supported_os}")

        if not validate_file_path(self.os_release):
            raise ValueError(f"Invalid os-release path: {self.os_release}")


@dataclass
class RunConfig:
    """Per-run options that are usually given on the command line."""

    role: Optional[str] = None
    host_ip: Optional[str] = None
    interactive: bool = True
    idempotent: bool = False

    def __post_init__(self) -> None:
        """Validate run configuration."""
        if self.role is not None and self.role not in ROLE_NAMES:
            raise ValueError(f"Invalid role: {self.role}")

        if self.host_ip is not None and not validate_ipv4_address(self.host_ip):
            raise ValueError(f"Invalid host IP address: {self.host_ip}")

        if not validate_boolean(self.interactive):
            raise ValueError(f"Interactive must be boolean: {self.interactive}")

        if not validate_boolean(self.idempotent):
            raise ValueError(f"Idempotent must be boolean: {self.idempotent}")


@dataclass
class LoggingConfig:
    """Logging configuration section."""

    level: str = "INFO"
    file: Optional[str] = None
    max_size_mb: int = 10
    backup_count: int = 5
    colors: bool = True

    def __post_init__(self) -> None:
        """Validate logging configuration."""
        if not validate_log_level(self.level):
            raise ValueError(f"Invalid log level: {self.level}")

        if self.file is not None and not validate_file_path(self.file):
            raise ValueError(f"Invalid log file path: {self.file}")

        if not validate_positive_int(self.max_size_mb):
            raise ValueError(f"Max size MB must be positive: {self.max_size_mb}")

        if not validate_positive_int(self.backup_count):
            raise ValueError(f"Backup count must be positive: {self.backup_count}")

        if not validate_boolean(self.colors):
            raise ValueError(f"Colors must be boolean: {self.colors}")


@dataclass
class ProvisionerConfig:
    """Main provisioner configuration."""

    deployment: DeploymentConfig = field(default_factory=DeploymentConfig)
    zone: ZoneConfig = field(default_factory=ZoneConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)
    service: ServiceConfig = field(default_factory=ServiceConfig)
    run: RunConfig = field(default_factory=RunConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def create_default_config() -> ProvisionerConfig:
    """Create a default configuration instance."""
    return ProvisionerConfig()
