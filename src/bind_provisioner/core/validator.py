"""
Configuration Validation

Runs the BIND syntax checkers over the generated files. A rejected file is
fatal. A missing zone checker only skips the zone check.
"""

from pathlib import Path

from ..config.schema import ProvisionerConfig
from ..provision_logging import get_logger
from .exceptions import CommandError, ToolNotFoundError, ValidationError
from .renderer import forward_zone_filename
from .roles import Role
from .system import HostSystem, describe_failure


class ConfigValidator:
    """Validates named.conf and, on the primary, the forward zone."""

    def __init__(self, config: ProvisionerConfig, system: HostSystem):
        self.config = config
        self.system = system
        self.logger = get_logger("validator")

    def validate(self, role: Role) -> None:
        """Run all checks for ``role``.

        Raises:
            ValidationError: If a checker rejects a file, or named-checkconf is missing
        """
        self.logger.info("Validating BIND configuration...")
        self.check_config()

        # Slave zones arrive by transfer, nothing local to check yet
        if role is Role.PRIMARY:
            self.check_forward_zone()

    def check_config(self) -> None:
        named_conf = self.config.paths.named_conf
        try:
            self.system.check_config(named_conf)
        except CommandError as e:
            details = describe_failure(e)
            self.logger.error("named.conf syntax error", path=named_conf)
            if details:
                self.logger.error(details)
            raise ValidationError(f"named.conf syntax error: {e}") from e

        self.logger.info("named.conf syntax is OK")

    def check_forward_zone(self) -> bool:
        """Check the forward zone file. Returns False if the check was skipped."""
        domain = self.config.deployment.domain
        zone_path = str(
            Path(self.config.paths.zone_dir)
            / forward_zone_filename(domain, self.config.paths)
        )

        try:
            self.system.check_zone(domain, zone_path)
        except ToolNotFoundError:
            self.logger.warning(
                f"{self.config.service.checkzone_command} command not found, "
                "skipping zone validation"
            )
            return False
        except CommandError as e:
            details = describe_failure(e)
            self.logger.error(f"Zone file for {domain} has errors", path=zone_path)
            if details:
                self.logger.error(details)
            raise ValidationError(f"Zone file for {domain} has errors") from e

        self.logger.info(f"Zone file for {domain} is OK")
        return True
