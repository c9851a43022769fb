"""
Provisioner Configuration Module

Dataclass schema, validators and the file/environment loader.
"""

from .loader import ConfigLoader, load_config_from_file
from .schema import (
    DeploymentConfig,
    LoggingConfig,
    PathsConfig,
    ProvisionerConfig,
    RunConfig,
    ServiceConfig,
    ZoneConfig,
    create_default_config,
)

__all__ = [
    "ConfigLoader",
    "load_config_from_file",
    "ProvisionerConfig",
    "DeploymentConfig",
    "ZoneConfig",
    "PathsConfig",
    "ServiceConfig",
    "RunConfig",
    "LoggingConfig",
    "create_default_config",
]
