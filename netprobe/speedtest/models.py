"""Shared dataclasses for the network probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from urllib.parse import urlparse

from .regions import group_for_country, group_for_region

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CandidateServer:
    id: str
    host: str
    name: str
    sponsor: str
    country: str
    url: str
    region: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], region: str) -> "CandidateServer":
        return cls(
            id=str(payload["id"]),
            host=str(payload.get("host") or ""),
            name=str(payload.get("name") or ""),
            sponsor=str(payload.get("sponsor") or ""),
            country=str(payload.get("country") or ""),
            url=str(payload.get("url") or ""),
            region=region,
        )

    @property
    def group(self) -> str:
        return group_for_country(self.country)

    @property
    def region_group(self) -> str:
        return group_for_region(self.region)

    @property
    def label(self) -> str:
        return self.sponsor or self.name

    @property
    def location(self) -> str:
        return f"{self.name}, {self.country}"

    @property
    def hostname(self) -> str:
        if self.url:
            parsed = urlparse(self.url)
            if parsed.hostname:
                return parsed.hostname
        return self.host.split(":")[0]


@dataclass(frozen=True)
class LatencyMeasurement:
    server: CandidateServer
    latency_ms: Optional[float]

    @property
    def ok(self) -> bool:
        return self.latency_ms is not None


@dataclass(frozen=True)
class SelectedServer:
    server: CandidateServer
    latency_ms: float
    estimated: bool = False


@dataclass(frozen=True)
class SpeedTestResult:
    server: str
    location: str
    download_mbps: float
    upload_mbps: Optional[float]
    latency_ms: float

    @property
    def download(self) -> str:
        return format_mbps(self.download_mbps)

    @property
    def upload(self) -> str:
        return format_mbps(self.upload_mbps)

    @property
    def latency(self) -> str:
        return f"{self.latency_ms:.2f} ms"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server": self.server,
            "location": self.location,
            "download": self.download,
            "upload": self.upload,
            "latency": self.latency,
            "download_mbps": self.download_mbps,
            "upload_mbps": self.upload_mbps,
            "latency_ms": self.latency_ms,
        }


@dataclass(frozen=True)
class HostIdentity:
    ip: str = UNKNOWN
    provider: str = UNKNOWN
    location: str = UNKNOWN


@dataclass(frozen=True)
class NetworkResult:
    public_ip: str = UNKNOWN
    provider: str = UNKNOWN
    location: str = UNKNOWN
    tests: Tuple[SpeedTestResult, ...] = ()
    warnings: Tuple[str, ...] = ()
    duration_seconds: float = 0.0
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "publicIp": self.public_ip,
            "provider": self.provider,
            "location": self.location,
            "tests": [test.to_dict() for test in self.tests],
            "warnings": list(self.warnings),
            "durationSeconds": round(self.duration_seconds, 1),
        }


def bytes_per_second_to_mbps(value: float) -> float:
    return (value * 8) / 1_000_000


def format_mbps(value: Optional[float]) -> str:
    if value is None or value <= 0:
        return "N/A"
    return f"{value:.0f} Mbps"
