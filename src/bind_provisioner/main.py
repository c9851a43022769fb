"""
BIND Provisioner Main Entry Point

This script provides the command-line entry point for provisioning a BIND
primary or secondary name server.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

import yaml

from bind_provisioner import __version__
from bind_provisioner.config.loader import ConfigLoader
from bind_provisioner.config.schema import ProvisionerConfig
from bind_provisioner.core import (
    ProvisionError,
    Provisioner,
    SubprocessHostSystem,
    verify_deployment,
)
from bind_provisioner.provision_logging import get_logger, log_exception, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bind-provisioner",
        description="Install and configure a BIND primary or secondary name server",
    )
    parser.add_argument("--config", "-c", help="Configuration file path (YAML or JSON)")
    parser.add_argument(
        "--role",
        choices=["primary", "secondary"],
        help="Server role; skips detection from the host address",
    )
    parser.add_argument(
        "--host-ip", help="Address to detect the role from instead of the host's own"
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Fail instead of prompting when the role cannot be detected",
    )
    parser.add_argument(
        "--idempotent",
        action="store_true",
        help="Only rewrite files and restart named when the output changes",
    )
    parser.add_argument(
        "--no-update", action="store_true", help="Skip the full system package update"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console and file log level",
    )
    parser.add_argument(
        "--verify",
        nargs="?",
        const="127.0.0.1",
        metavar="SERVER",
        help="Query SERVER (default 127.0.0.1) for the deployment's records and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def cli_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate command-line options into configuration overrides."""
    overrides: Dict[str, Dict[str, Any]] = {"run": {}, "service": {}, "logging": {}}

    if args.role:
        overrides["run"]["role"] = args.role
    if args.host_ip:
        overrides["run"]["host_ip"] = args.host_ip
    if args.non_interactive:
        overrides["run"]["interactive"] = False
    if args.idempotent:
        overrides["run"]["idempotent"] = True
    if args.no_update:
        overrides["service"]["update_system"] = False
    if args.log_level:
        overrides["logging"]["level"] = args.log_level

    return {section: values for section, values in overrides.items() if values}


def load_config(args: argparse.Namespace) -> ProvisionerConfig:
    return ConfigLoader(args.config).load_config(cli_overrides(args))


def run_verify(config: ProvisionerConfig, nameserver: str) -> int:
    logger = get_logger("bind_provisioner")
    report = verify_deployment(config.deployment, nameserver)
    if report.ok:
        logger.info(f"All {report.checks} checks passed", nameserver=nameserver)
        return 0

    for problem in report.problems:
        logger.error(problem)
    logger.error(
        f"{len(report.problems)} of {report.checks} checks failed", nameserver=nameserver
    )
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main function; returns the process exit status."""
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except (ValueError, FileNotFoundError, yaml.YAMLError, json.JSONDecodeError) as e:
        print(f"[ERROR] Invalid configuration: {e}", file=sys.stderr)
        return 1

    setup_logging(config.logging)
    logger = get_logger("bind_provisioner")

    try:
        if args.verify:
            return run_verify(config, args.verify)

        system = SubprocessHostSystem(config.service)
        Provisioner(config, system).run()
        return 0
    except ProvisionError as e:
        log_exception(logger, str(e), e)
        return 1
    except KeyboardInterrupt:
        logger.error("Interrupted")
        return 1
    except OSError as e:
        log_exception(logger, "Filesystem operation failed", e)
        return 1


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
