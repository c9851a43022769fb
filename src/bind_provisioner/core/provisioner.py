"""
Provisioning Orchestrator

Runs the provisioning steps in a fixed order. Any step that raises stops the
run; in particular nothing is restarted after a failed validation.
"""

import os
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from ..config.schema import ProvisionerConfig
from ..provision_logging import bind_run_context, get_logger
from .files import (
    ZONE_FILE_MODE,
    backup_file,
    ensure_directory,
    is_unchanged,
    write_text,
)
from .preflight import check_os, check_root
from .renderer import forward_zone_filename, render_named_conf, reverse_zone_filename
from .roles import Role, discover_host_ip, resolve_role
from .system import HostSystem
from .validator import ConfigValidator
from .zones import choose_serial, read_serial, render_zones, reverse_origin


@dataclass
class ProvisionResult:
    """Outcome of a successful run."""

    role: Role
    serial: Optional[int] = None
    written: List[str] = field(default_factory=list)
    restarted: bool = False


class Provisioner:
    """Installs and configures BIND on one host of the primary/secondary pair."""

    def __init__(
        self,
        config: ProvisionerConfig,
        system: HostSystem,
        input_func: Callable[[str], str] = input,
        today: Callable[[], date] = date.today,
        geteuid: Callable[[], int] = os.geteuid,
        host_ip: Callable[[], Optional[str]] = discover_host_ip,
    ):
        self.config = config
        self.system = system
        self.input_func = input_func
        self.today = today
        self.geteuid = geteuid
        self.host_ip = host_ip
        self.validator = ConfigValidator(config, system)
        self.logger = get_logger("provisioner")

    @property
    def zone_dir(self) -> Path:
        return Path(self.config.paths.zone_dir)

    @property
    def forward_zone_path(self) -> Path:
        return self.zone_dir / forward_zone_filename(
            self.config.deployment.domain, self.config.paths
        )

    @property
    def reverse_zone_path(self) -> Path:
        return self.zone_dir / reverse_zone_filename(
            self.config.deployment.domain, self.config.paths
        )

    def run(self) -> ProvisionResult:
        """Execute every step; raises on the first failure."""
        self.logger.info("Starting BIND9 DNS server setup...")

        self.preflight()
        self.install()
        self.create_zone_dir()
        role = self.determine_role()
        bind_run_context(role=str(role))

        result = ProvisionResult(role=role)
        self.configure_named(role, result)
        if role is Role.PRIMARY:
            self.configure_primary(result)
        else:
            self.configure_secondary(result)

        self.validator.validate(role)

        if self.config.run.idempotent and not result.written:
            self.logger.info("Configuration unchanged, not restarting named")
        else:
            self.restart()
            result.restarted = True

        self.display_summary(role)
        self.logger.info("BIND9 DNS server setup completed!")
        return result

    def preflight(self) -> None:
        check_root(self.geteuid)
        distro = check_os(self.config.service.os_release, self.config.service.supported_os)
        self.logger.debug("Preflight checks passed", os=distro)

    def install(self) -> None:
        service = self.config.service
        if service.update_system:
            self.logger.info("Updating system packages...")
            self.system.update_packages()

        self.logger.info("Installing BIND9...", packages=service.packages)
        self.system.install_packages(service.packages)
        self.system.enable_service(service.service_name)

    def create_zone_dir(self) -> None:
        self.logger.info("Creating zone file directory...", path=str(self.zone_dir))
        ensure_directory(
            self.zone_dir, self.config.service.owner, self.config.service.group
        )

    def determine_role(self) -> Role:
        run = self.config.run
        observed_ip = run.host_ip
        if observed_ip is None and run.role is None:
            observed_ip = self.host_ip()

        return resolve_role(
            self.config.deployment,
            observed_ip,
            explicit_role=run.role,
            interactive=run.interactive,
            input_func=self.input_func,
        )

    def configure_named(self, role: Role, result: ProvisionResult) -> None:
        """Back up and rewrite named.conf for ``role``."""
        self.logger.info("Configuring BIND9 options...")
        paths = self.config.paths
        content = render_named_conf(self.config, role)

        if self.config.run.idempotent and is_unchanged(paths.named_conf, content):
            self.logger.info("named.conf is up to date", path=paths.named_conf)
            return

        backup_file(paths.named_conf, paths.backup_conf)
        write_text(paths.named_conf, content)
        result.written.append(paths.named_conf)

    def configure_primary(self, result: ProvisionResult) -> None:
        """Write the forward and reverse zone files."""
        self.logger.info("Configuring primary DNS server...")
        deployment = self.config.deployment
        zone_config = self.config.zone

        existing = [
            read_serial(self.forward_zone_path, deployment.domain),
            read_serial(self.reverse_zone_path, reverse_origin(deployment)),
        ]
        known = [serial for serial in existing if serial is not None]

        if self.config.run.idempotent and known:
            current = render_zones(deployment, zone_config, max(known))
            if is_unchanged(self.forward_zone_path, current.forward) and is_unchanged(
                self.reverse_zone_path, current.reverse
            ):
                self.logger.info("Zone files are up to date", serial=current.serial)
                result.serial = current.serial
                return

        serial = choose_serial(zone_config, self.today(), existing)
        zones = render_zones(deployment, zone_config, serial)
        result.serial = serial

        owner, group = self.config.service.owner, self.config.service.group

        self.logger.info("Creating forward zone file...", serial=serial)
        write_text(self.forward_zone_path, zones.forward, owner, group, ZONE_FILE_MODE)
        result.written.append(str(self.forward_zone_path))

        self.logger.info("Creating reverse zone file...", serial=serial)
        write_text(self.reverse_zone_path, zones.reverse, owner, group, ZONE_FILE_MODE)
        result.written.append(str(self.reverse_zone_path))

    def configure_secondary(self, result: ProvisionResult) -> None:
        """Provision the empty directory zone transfers are written to."""
        self.logger.info("Configuring secondary DNS server...")
        slaves_dir = self.zone_dir / self.config.paths.slaves_subdir
        existed = slaves_dir.is_dir()

        ensure_directory(
            slaves_dir, self.config.service.owner, self.config.service.group
        )
        if not existed:
            result.written.append(str(slaves_dir))

    def restart(self) -> None:
        service = self.config.service.service_name
        self.logger.info("Restarting BIND9 service...")
        self.system.restart_service(service)

        status = self.system.service_status(service)
        for line in status.splitlines():
            self.logger.info(line)

    def display_summary(self, role: Role) -> None:
        deployment = self.config.deployment
        domain = deployment.domain
        service = f"{deployment.service_name}.{domain}"

        self.logger.info(f"DNS Configuration Summary ({role}):")
        self.logger.info(f"Domain: {domain}")
        self.logger.info(
            f"Primary NS: {deployment.primary_hostname} ({deployment.primary_ip})"
        )
        self.logger.info(
            f"Secondary NS: {deployment.secondary_hostname} ({deployment.secondary_ip})"
        )
        self.logger.info(
            f"A records for {deployment.service_name}: "
            + ", ".join(deployment.service_addresses)
        )
        self.logger.info("To test DNS resolution, you can use:")
        for command in (
            f"dig @localhost {domain}",
            f"dig @localhost {service}",
            f"nslookup {domain} localhost",
            f"nslookup {service} localhost",
            f"host {domain} localhost",
            f"host {service} localhost",
            "bind-provisioner --verify 127.0.0.1",
        ):
            self.logger.info(f"  {command}")
