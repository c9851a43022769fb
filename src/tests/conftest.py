"""Shared fixtures for the provisioner tests."""

from datetime import date
from typing import List, Optional, Sequence, Tuple

import pytest

from bind_provisioner.config.schema import (
    LoggingConfig,
    PathsConfig,
    ProvisionerConfig,
    RunConfig,
    ServiceConfig,
)
from bind_provisioner.core.exceptions import CommandError, ToolNotFoundError
from bind_provisioner.core.system import HostSystem
from bind_provisioner.provision_logging import setup_logging

TODAY = date(2024, 5, 17)


@pytest.fixture(autouse=True)
def configured_logging():
    """Every test runs with logging configured, as main() does."""
    setup_logging(LoggingConfig(level="DEBUG", colors=False))


class FakeHostSystem(HostSystem):
    """Records calls instead of touching the host."""

    def __init__(
        self,
        checkconf_error: Optional[CommandError] = None,
        checkzone_error: Optional[CommandError] = None,
        fail_on: Optional[str] = None,
    ):
        self.calls: List[Tuple] = []
        self.checkconf_error = checkconf_error
        self.checkzone_error = checkzone_error
        self.fail_on = fail_on

    def _record(self, *call):
        self.calls.append(call)
        if self.fail_on == call[0]:
            raise CommandError([call[0]], 1, "boom")

    @property
    def names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def update_packages(self) -> None:
        self._record("update_packages")

    def install_packages(self, packages: Sequence[str]) -> None:
        self._record("install_packages", tuple(packages))

    def enable_service(self, service: str) -> None:
        self._record("enable_service", service)

    def restart_service(self, service: str) -> None:
        self._record("restart_service", service)

    def service_status(self, service: str) -> str:
        self._record("service_status", service)
        return "named.service - Berkeley Internet Name Domain (DNS)\n   Active: active (running)"

    def check_config(self, config_path: str) -> str:
        self._record("check_config", config_path)
        if self.checkconf_error:
            raise self.checkconf_error
        return ""

    def check_zone(self, zone: str, zone_path: str) -> str:
        self._record("check_zone", zone, zone_path)
        if self.checkzone_error:
            raise self.checkzone_error
        return "zone OK"


@pytest.fixture
def fake_system():
    return FakeHostSystem()


@pytest.fixture
def missing_checkzone_system():
    return FakeHostSystem(checkzone_error=ToolNotFoundError(["named-checkzone"]))


@pytest.fixture
def os_release(tmp_path):
    path = tmp_path / "os-release"
    path.write_text('NAME="Rocky Linux"\nVERSION_ID="9.3"\nID="rocky"\n')
    return path


def make_config(tmp_path, os_release_path, **run) -> ProvisionerConfig:
    """Configuration pointing every path into ``tmp_path``."""
    etc = tmp_path / "etc"
    etc.mkdir(exist_ok=True)
    return ProvisionerConfig(
        paths=PathsConfig(
            named_conf=str(etc / "named.conf"),
            backup_conf=str(etc / "named.conf.backup"),
            zone_dir=str(tmp_path / "var" / "named"),
        ),
        service=ServiceConfig(owner=None, group=None, os_release=str(os_release_path)),
        run=RunConfig(**run),
    )


@pytest.fixture
def config_factory(tmp_path, os_release):
    def factory(**run):
        return make_config(tmp_path, os_release, **run)

    return factory


@pytest.fixture
def make_system():
    return FakeHostSystem
