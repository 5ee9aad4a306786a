"""Download/upload throughput measurement against a single server."""

from __future__ import annotations

import logging
import re
import shlex
from typing import Optional

from ..config import NetworkConfig
from .executor import Executor
from .models import bytes_per_second_to_mbps

LOGGER = logging.getLogger(__name__)

DOWNLOAD_RESOURCE = "random4000x4000.jpg"


def download_url(server_url: str) -> str:
    base = re.sub(r"/upload.*$", "", server_url)
    return f"{base.rstrip('/')}/{DOWNLOAD_RESOURCE}"


def parse_speed(output: str) -> Optional[float]:
    """Parse a curl ``speed_*`` value (bytes per second) into Mbps."""
    try:
        value = float((output or "").strip())
    except ValueError:
        return None
    if value <= 0:
        return None
    return bytes_per_second_to_mbps(value)


def _curl_limits(settings: NetworkConfig) -> str:
    return f"--connect-timeout {settings.transfer_connect_timeout} --max-time {settings.transfer_max_time}"


def measure_download(server_url: str, executor: Executor, settings: NetworkConfig) -> float:
    """Return download throughput in Mbps, 0.0 when nothing could be measured."""
    command = (
        f"curl -o /dev/null -w '%{{speed_download}}' -s {_curl_limits(settings)} "
        f"{shlex.quote(download_url(server_url))}"
    )
    mbps = parse_speed(executor.run(command, timeout=settings.transfer_max_time + 5))
    if mbps is None:
        LOGGER.debug("Download from %s was not measurable", server_url)
        return 0.0
    return mbps


def measure_upload(server_url: str, executor: Executor, settings: NetworkConfig) -> Optional[float]:
    """Return upload throughput in Mbps, or None when the upload failed."""
    command = (
        f"dd if=/dev/urandom bs={settings.upload_block_kb}K count={settings.upload_block_count} 2>/dev/null"
        f" | curl -o /dev/null -w '%{{speed_upload}}' -s {_curl_limits(settings)}"
        f" -X POST -F 'content0=<-' {shlex.quote(server_url)}"
    )
    mbps = parse_speed(executor.run(command, timeout=settings.transfer_max_time + 5))
    if mbps is None:
        LOGGER.debug("Upload to %s was not measurable", server_url)
    return mbps
