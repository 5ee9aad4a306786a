from urllib.parse import urlparse

import requests

from netprobe.config import GeoIPConfig
from netprobe.speedtest.geoip import lookup_provider, lookup_public_ip, resolve_host_identity

from .conftest import FakeSession

IP = "203.0.113.7"


def test_public_ip_from_primary_service(geoip_settings):
    session = FakeSession({"https://ip.example/primary": f"{IP}\n"})

    assert lookup_public_ip(session, geoip_settings) == IP
    assert session.requested == ["https://ip.example/primary"]


def test_public_ip_falls_back_when_primary_fails(geoip_settings):
    session = FakeSession(
        {
            "https://ip.example/primary": requests.Timeout("slow"),
            "https://ip.example/fallback": IP,
        }
    )
    assert lookup_public_ip(session, geoip_settings) == IP


def test_non_ipv4_answers_are_ignored(geoip_settings):
    session = FakeSession(
        {
            "https://ip.example/primary": "2001:db8::1",
            "https://ip.example/fallback": "<html>",
        }
    )
    assert lookup_public_ip(session, geoip_settings) == "Unknown"


def test_provider_from_primary_lookup(geoip_settings):
    session = FakeSession(
        {
            f"http://geo.example/primary/{IP}": {
                "status": "success",
                "org": "Example Hosting",
                "isp": "Example ISP",
                "city": "Frankfurt",
                "regionName": "Hesse",
                "country": "Germany",
            }
        }
    )
    assert lookup_provider(IP, session, geoip_settings) == ("Example Hosting", "Frankfurt, Hesse, Germany")


def test_provider_falls_back_to_secondary_lookup(geoip_settings):
    session = FakeSession(
        {
            f"http://geo.example/primary/{IP}": "not json",
            f"https://geo.example/fallback/{IP}": {"org": "AS64500 Example", "city": "Tokyo", "country": "JP"},
        }
    )
    assert lookup_provider(IP, session, geoip_settings) == ("AS64500 Example", "Tokyo, JP")


def test_unknown_ip_skips_provider_lookup(geoip_settings):
    session = FakeSession()
    assert lookup_provider("Unknown", session, geoip_settings) == ("Unknown", "Unknown")
    assert session.requested == []


def test_everything_failing_yields_unknown(geoip_settings):
    identity = resolve_host_identity(FakeSession(), geoip_settings)
    assert (identity.ip, identity.provider, identity.location) == ("Unknown", "Unknown", "Unknown")


def test_default_echo_services_only_answer_over_ipv4():
    settings = GeoIPConfig()
    assert [urlparse(url).hostname for url in settings.ip_services] == ["api.ipify.org", "ipv4.icanhazip.com"]

    session = FakeSession(
        {
            "https://api.ipify.org": requests.ConnectionError("unreachable"),
            "https://ipv4.icanhazip.com": f"{IP}\n",
        }
    )
    assert lookup_public_ip(session, settings) == IP
