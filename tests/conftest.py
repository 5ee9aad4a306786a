from __future__ import annotations

import json
import threading
from typing import Dict, List, Optional, Sequence, Tuple, Union

import pytest
import requests

from netprobe.config import GeoIPConfig, NetworkConfig
from netprobe.speedtest.models import CandidateServer, LatencyMeasurement

GROUP_COUNTRIES = {
    "Vietnam": "Vietnam",
    "Southeast Asia": "Singapore",
    "East Asia": "Japan",
    "South Asia": "India",
    "Oceania": "Australia",
    "Europe": "Germany",
    "North America": "United States",
    "South America": "Brazil",
    "Africa": "South Africa",
    "Middle East": "Israel",
    "Russia": "Russia",
}


class FakeExecutor:
    """Returns scripted output for commands containing all of a rule's fragments."""

    def __init__(self):
        self.rules: List[Tuple[Tuple[str, ...], str]] = []
        self.commands: List[str] = []
        self._lock = threading.Lock()

    def respond(self, fragments: Union[str, Sequence[str]], output: str) -> "FakeExecutor":
        if isinstance(fragments, str):
            fragments = (fragments,)
        self.rules.append((tuple(fragments), output))
        return self

    def run(self, command: str, timeout: Optional[float] = None) -> str:
        with self._lock:
            self.commands.append(command)
        for fragments, output in self.rules:
            if all(fragment in command for fragment in fragments):
                return output
        return ""

    def matching(self, fragment: str) -> List[str]:
        return [command for command in self.commands if fragment in command]


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Maps URLs to responses or exceptions; unknown URLs raise ConnectionError."""

    def __init__(self, routes: Optional[Dict[str, object]] = None):
        self.routes = dict(routes or {})
        self.requested: List[str] = []

    def get(self, url, timeout=None, headers=None):
        self.requested.append(url)
        outcome = self.routes.get(url)
        if outcome is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, dict):
            return FakeResponse(json.dumps(outcome))
        return FakeResponse(str(outcome))


def make_server(server_id, country="Germany", name=None, sponsor=None, region="", host=None):
    name = name or f"City{server_id}"
    host = host or f"s{server_id}.example.net:8080"
    return CandidateServer(
        id=str(server_id),
        host=host,
        name=name,
        sponsor=sponsor if sponsor is not None else f"Sponsor {server_id}",
        country=country,
        url=f"http://{host}/speedtest/upload.php",
        region=region,
    )


def server_payload(server_id, country="Germany", name=None):
    server = make_server(server_id, country=country, name=name)
    return {
        "id": server.id,
        "host": server.host,
        "name": server.name,
        "sponsor": server.sponsor,
        "country": server.country,
        "url": server.url,
        "lat": "0",
        "lon": "0",
    }


def measured(server_id, country, latency):
    return LatencyMeasurement(make_server(server_id, country=country), latency)


@pytest.fixture
def network_settings():
    return NetworkConfig()


@pytest.fixture
def geoip_settings():
    return GeoIPConfig(
        ip_services=["https://ip.example/primary", "https://ip.example/fallback"],
        primary_lookup="http://geo.example/primary/{ip}",
        fallback_lookup="https://geo.example/fallback/{ip}",
    )


@pytest.fixture
def fake_executor():
    return FakeExecutor()
