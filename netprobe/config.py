"""Configuration loading helpers for the network probe."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml


@dataclass
class PathsConfig:
    data_dir: Path
    logs_dir: Path


@dataclass
class NetworkConfig:
    max_servers: int = 20
    batch_size: int = 5
    per_group_probe: int = 3
    directory_url: str = "https://www.speedtest.net/api/js/servers?engine=js"
    directory_limit: int = 3
    directory_connect_timeout: int = 3
    directory_max_time: int = 5
    ping_timeout: int = 5
    transfer_connect_timeout: int = 5
    transfer_max_time: int = 15
    upload_block_kb: int = 256
    upload_block_count: int = 4
    placeholder_latency_ms: float = 999.0
    deadline_seconds: Optional[float] = None
    command_timeout: int = 30
    regions: List[str] = field(default_factory=list)
    group_priority: List[str] = field(default_factory=list)


@dataclass
class GeoIPConfig:
    ip_services: List[str] = field(
        default_factory=lambda: ["https://api.ipify.org", "https://ipv4.icanhazip.com"]
    )
    primary_lookup: str = "http://ip-api.com/json/{ip}"
    fallback_lookup: str = "https://ipinfo.io/{ip}/json"
    timeout: int = 5


@dataclass
class ExportConfig:
    csv_name: str = "results.csv"


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    root_dir: Path
    paths: PathsConfig
    network: NetworkConfig
    geoip: GeoIPConfig
    export: ExportConfig
    logging: LoggingConfig


def _as_path(base: Path, maybe_path: Optional[str]) -> Path:
    if not maybe_path:
        raise ValueError("Path configuration entries cannot be empty")
    path = (base / maybe_path).resolve()
    path.mkdir(parents=True, exist_ok=True)
    return path


def load_config(path: Optional[str] = None) -> AppConfig:
    """Load application configuration from a YAML file.

    An explicit ``path`` must exist. Without one, ``config.yaml`` in the
    working directory is used when present, otherwise built-in defaults.
    """

    root_dir = Path(path).resolve().parent if path else Path.cwd()
    source_path = Path(path) if path else root_dir / "config.yaml"
    if path and not source_path.exists():
        raise FileNotFoundError(f"Missing configuration file at {source_path}")

    data = {}
    if source_path.exists():
        with source_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}

    paths_data = data.get("paths", {})
    paths = PathsConfig(
        data_dir=_as_path(root_dir, paths_data.get("data_dir", "data")),
        logs_dir=_as_path(root_dir, paths_data.get("logs_dir", "logs")),
    )

    config = AppConfig(
        root_dir=root_dir,
        paths=paths,
        network=NetworkConfig(**data.get("network", {})),
        geoip=GeoIPConfig(**data.get("geoip", {})),
        export=ExportConfig(**data.get("export", {})),
        logging=LoggingConfig(**data.get("logging", {})),
    )

    if config.network.max_servers < 1:
        raise ValueError("network.max_servers must be at least 1")
    if config.network.batch_size < 1:
        raise ValueError("network.batch_size must be at least 1")

    return config
