"""Tests for zone-file rendering and serial numbers."""

import re
from datetime import date

import dns.rdatatype
import dns.zone
import pytest

from bind_provisioner.config.schema import DeploymentConfig, ZoneConfig
from bind_provisioner.core.zones import (
    choose_serial,
    date_serial,
    next_serial,
    read_serial,
    render_forward_zone,
    render_reverse_zone,
    render_zones,
)

TODAY = date(2024, 5, 17)
SERIAL = 2024051701


def parse(text, origin):
    return dns.zone.from_text(text, origin=origin, relativize=True)


def texts(zone, name, rdtype):
    rdataset = zone.get_rdataset(name, rdtype)
    return sorted(rdata.to_text() for rdata in rdataset) if rdataset else []


class TestForwardZone:
    """Test the forward zone content."""

    def setup_method(self):
        self.deployment = DeploymentConfig()
        self.text = render_forward_zone(self.deployment, ZoneConfig(), SERIAL)
        self.zone = parse(self.text, "local.mydomainz.id.")

    def test_soa(self):
        soa = self.zone.get_rdataset("@", dns.rdatatype.SOA)[0]

        assert soa.mname.to_text() == "ns1"
        assert soa.rname.to_text() == "admin"
        assert soa.serial == SERIAL
        assert soa.refresh == 86400
        assert soa.retry == 3600
        assert soa.expire == 604800
        assert soa.minimum == 10800

    def test_default_ttl(self):
        assert self.text.startswith("$TTL 1D\n")
        assert self.zone.get_rdataset("@", dns.rdatatype.SOA).ttl == 86400

    def test_exactly_two_name_servers(self):
        assert texts(self.zone, "@", dns.rdatatype.NS) == ["ns1", "ns2"]

    def test_name_server_addresses(self):
        assert texts(self.zone, "ns1", dns.rdatatype.A) == ["172.30.0.53"]
        assert texts(self.zone, "ns2", dns.rdatatype.A) == ["172.30.0.56"]

    def test_service_records(self):
        assert texts(self.zone, "app-test", dns.rdatatype.A) == [
            "172.30.0.52",
            "172.30.0.53",
            "172.30.0.54",
        ]

    def test_www_alias_to_apex(self):
        assert texts(self.zone, "www", dns.rdatatype.CNAME) == ["@"]
        assert re.search(r"^www\s+IN CNAME @$", self.text, re.M)

    def test_no_other_names(self):
        names = {name.to_text() for name in self.zone.nodes}
        assert names == {"@", "ns1", "ns2", "app-test", "www"}

    def test_custom_aliases_and_mailbox(self):
        deployment = DeploymentConfig(
            aliases={"ftp": "www", "cdn": "edge.example.net", "www": "@"},
            admin_mailbox="hostmaster.local.mydomainz.id",
        )
        zone = parse(
            render_forward_zone(deployment, ZoneConfig(), SERIAL), "local.mydomainz.id."
        )

        assert texts(zone, "ftp", dns.rdatatype.CNAME) == ["www"]
        assert texts(zone, "cdn", dns.rdatatype.CNAME) == ["edge.example.net."]
        soa = zone.get_rdataset("@", dns.rdatatype.SOA)[0]
        assert soa.rname.to_text() == "hostmaster"


class TestReverseZone:
    """Test the reverse zone content."""

    def setup_method(self):
        self.text = render_reverse_zone(DeploymentConfig(), ZoneConfig(), SERIAL)
        self.zone = parse(self.text, "0.30.172.in-addr.arpa.")

    def test_soa_matches_forward_timers(self):
        soa = self.zone.get_rdataset("@", dns.rdatatype.SOA)[0]

        assert soa.mname.to_text() == "ns1.local.mydomainz.id."
        assert soa.serial == SERIAL
        assert (soa.refresh, soa.retry, soa.expire, soa.minimum) == (
            86400,
            3600,
            604800,
            10800,
        )

    def test_name_servers(self):
        assert texts(self.zone, "@", dns.rdatatype.NS) == [
            "ns1.local.mydomainz.id.",
            "ns2.local.mydomainz.id.",
        ]

    def test_ptr_per_name_server(self):
        assert texts(self.zone, "53", dns.rdatatype.PTR) == ["ns1.local.mydomainz.id."]
        assert texts(self.zone, "56", dns.rdatatype.PTR) == ["ns2.local.mydomainz.id."]
        assert {name.to_text() for name in self.zone.nodes} == {"@", "53", "56"}


class TestSerials:
    """Test serial-number generation."""

    def test_date_serial(self):
        assert date_serial(TODAY) == 2024051701

    def test_next_serial_fresh(self):
        assert next_serial(TODAY) == 2024051701
        assert next_serial(TODAY, 2024051599) == 2024051701

    def test_next_serial_same_day(self):
        assert next_serial(TODAY, 2024051701) == 2024051702
        assert next_serial(TODAY, 2024051709) == 2024051710

    def test_next_serial_never_goes_back(self):
        assert next_serial(TODAY, 2024060101) == 2024060102

    def test_date_policy_repeats_same_day(self):
        """The date policy gives the same serial for every run on one day."""
        zone_config = ZoneConfig(serial_policy="date")
        first = choose_serial(zone_config, TODAY, [])
        second = choose_serial(zone_config, TODAY, [first])

        assert first == second == 2024051701

    def test_increment_policy_strictly_increases(self):
        zone_config = ZoneConfig()
        first = choose_serial(zone_config, TODAY, [])
        second = choose_serial(zone_config, TODAY, [first, None])

        assert second > first

    def test_increment_uses_highest_existing(self):
        assert choose_serial(ZoneConfig(), TODAY, [2024051703, 2024051705]) == 2024051706

    def test_both_zones_share_serial(self):
        zones = render_zones(DeploymentConfig(), ZoneConfig(), SERIAL)

        assert zones.serial == SERIAL
        assert f"{SERIAL}  ; Serial" in zones.forward
        assert f"{SERIAL}  ; Serial" in zones.reverse


class TestReadSerial:
    """Test reading the serial back from disk."""

    def test_missing_file(self, tmp_path):
        assert read_serial(tmp_path / "absent.zone", "local.mydomainz.id") is None

    def test_round_trip(self, tmp_path):
        path = tmp_path / "local.mydomainz.id.zone"
        path.write_text(render_forward_zone(DeploymentConfig(), ZoneConfig(), 2024051704))

        assert read_serial(path, "local.mydomainz.id") == 2024051704

    def test_reverse_file(self, tmp_path):
        path = tmp_path / "local.mydomainz.id.rev"
        path.write_text(render_reverse_zone(DeploymentConfig(), ZoneConfig(), 2024051702))

        assert read_serial(path, "0.30.172.in-addr.arpa") == 2024051702

    @pytest.mark.parametrize(
        "content",
        [
            b"this is not a zone file\n",
            b"$TTL 1D\n@ IN NS ns1\n",
            b"; caf\xe9 edited by hand\n$TTL 1D\n"
            b"@ IN SOA ns1 admin 2024051703 1D 1H 1W 3H\n@ IN NS ns1\n",
        ],
    )
    def test_unreadable_content(self, tmp_path, content):
        path = tmp_path / "broken.zone"
        path.write_bytes(content)

        assert read_serial(path, "local.mydomainz.id") is None
