"""
Deployment Verification

Queries a running name server and compares its answers with the deployment
identity: the SOA and NS set of the domain, name-server glue, the service
address set and the aliases. Meant for use after provisioning; the
provisioning run itself never calls it.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set

import dns.exception
import dns.resolver

from ..config.schema import DeploymentConfig
from ..provision_logging import get_logger

QueryFunc = Callable[[str, str], List[str]]


@dataclass
class VerificationReport:
    """Checks performed against a name server and the problems found."""

    nameserver: str
    checks: int = 0
    problems: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def make_query(nameserver: str, timeout: float = 5.0) -> QueryFunc:
    """Build a query function that asks ``nameserver`` directly."""
    resolver = dns.resolver.Resolver(configure=False)
    resolver.nameservers = [nameserver]
    resolver.lifetime = timeout

    def query(name: str, rdtype: str) -> List[str]:
        answer = resolver.resolve(name, rdtype, raise_on_no_answer=False)
        if answer.rrset is None:
            return []
        return [rdata.to_text() for rdata in answer.rrset]

    return query


def _fqdn(name: str) -> str:
    return name if name.endswith(".") else f"{name}."


def _names(values: List[str]) -> Set[str]:
    return {_fqdn(value).lower() for value in values}


def verify_deployment(
    deployment: DeploymentConfig,
    nameserver: str = "127.0.0.1",
    query: Optional[QueryFunc] = None,
) -> VerificationReport:
    """Check that ``nameserver`` serves the records of ``deployment``."""
    logger = get_logger("verify")
    query = query or make_query(nameserver)
    report = VerificationReport(nameserver=nameserver)
    domain = _fqdn(deployment.domain)

    def expect(name: str, rdtype: str, check: Callable[[List[str]], bool], wanted: str):
        report.checks += 1
        try:
            values = query(name, rdtype)
        except dns.resolver.NXDOMAIN:
            values = None
        except dns.exception.DNSException as e:
            report.problems.append(f"{rdtype} {name}: query failed ({e})")
            logger.warning("Query failed", name=name, type=rdtype, error=str(e))
            return

        if values is None or not check(values):
            got = "NXDOMAIN" if values is None else (", ".join(values) or "no answer")
            report.problems.append(f"{rdtype} {name}: expected {wanted}, got {got}")
            logger.warning("Unexpected answer", name=name, type=rdtype, got=got)
        else:
            logger.info("Answer OK", name=name, type=rdtype)

    primary_ns = _fqdn(deployment.primary_hostname).lower()
    secondary_ns = _fqdn(deployment.secondary_hostname).lower()

    expect(
        domain,
        "SOA",
        lambda values: len(values) == 1 and values[0].split()[0].lower() == primary_ns,
        f"SOA naming {primary_ns}",
    )
    expect(
        domain,
        "NS",
        lambda values: _names(values) == {primary_ns, secondary_ns},
        f"{primary_ns} and {secondary_ns}",
    )
    for hostname, ip in (
        (deployment.primary_hostname, deployment.primary_ip),
        (deployment.secondary_hostname, deployment.secondary_ip),
    ):
        expect(_fqdn(hostname), "A", lambda values, ip=ip: values == [ip], ip)

    wanted = set(deployment.service_addresses)
    expect(
        f"{deployment.service_name}.{domain}",
        "A",
        lambda values: set(values) == wanted,
        ", ".join(sorted(wanted)),
    )

    for label, target in deployment.aliases.items():
        if target == "@":
            target_name = domain
        elif "." in target:
            target_name = _fqdn(target)
        else:
            target_name = f"{target}.{domain}"
        expect(
            f"{label}.{domain}",
            "CNAME",
            lambda values, t=target_name.lower(): _names(values) == {t},
            target_name,
        )

    return report
