"""
Provisioner Core Module

This module exports role detection, rendering, validation and orchestration.
"""

from .exceptions import (
    CommandError,
    PreflightError,
    ProvisionError,
    RoleDetectionError,
    ToolNotFoundError,
    ValidationError,
)
from .provisioner import ProvisionResult, Provisioner
from .renderer import ptr_owner, render_named_conf, reverse_zone_name
from .roles import Role, detect_role, discover_host_ip, prompt_for_role, resolve_role
from .system import HostSystem, SubprocessHostSystem
from .validator import ConfigValidator
from .verify import VerificationReport, verify_deployment
from .zones import (
    RenderedZones,
    choose_serial,
    next_serial,
    read_serial,
    render_forward_zone,
    render_reverse_zone,
    render_zones,
)

__all__ = [
    # Orchestration
    "Provisioner",
    "ProvisionResult",
    # Roles
    "Role",
    "detect_role",
    "discover_host_ip",
    "prompt_for_role",
    "resolve_role",
    # Rendering
    "render_named_conf",
    "reverse_zone_name",
    "ptr_owner",
    "RenderedZones",
    "render_forward_zone",
    "render_reverse_zone",
    "render_zones",
    "choose_serial",
    "next_serial",
    "read_serial",
    # Host interaction
    "HostSystem",
    "SubprocessHostSystem",
    "ConfigValidator",
    "VerificationReport",
    "verify_deployment",
    # Errors
    "ProvisionError",
    "PreflightError",
    "RoleDetectionError",
    "ValidationError",
    "CommandError",
    "ToolNotFoundError",
]
