"""Latency probing for discovered servers (ICMP first, HTTP connect time second)."""

from __future__ import annotations

import logging
import re
import shlex
from typing import Callable, Dict, List, Optional, Sequence

from ..config import NetworkConfig
from .executor import Executor
from .models import CandidateServer, LatencyMeasurement

LOGGER = logging.getLogger(__name__)

PING_TIME_RE = re.compile(r"time[=<](\d+(?:\.\d+)?)", re.IGNORECASE)


def pick_probe_candidates(candidates: Sequence[CandidateServer], per_group: int = 3) -> List[CandidateServer]:
    """Keep at most ``per_group`` candidates per geographic group, in discovery order."""
    picked = []
    group_counts: Dict[str, int] = {}
    for candidate in candidates:
        count = group_counts.get(candidate.group, 0)
        if count >= per_group:
            continue
        group_counts[candidate.group] = count + 1
        picked.append(candidate)
    return picked


def parse_ping_output(output: str) -> Optional[float]:
    match = PING_TIME_RE.search(output or "")
    if not match:
        return None
    value = float(match.group(1))
    return value if value > 0 else None


def parse_connect_time(output: str) -> Optional[float]:
    """curl reports ``time_connect`` in seconds; convert to milliseconds."""
    try:
        seconds = float((output or "").strip())
    except ValueError:
        return None
    if seconds <= 0:
        return None
    return seconds * 1000


def ping_latency(hostname: str, executor: Executor, settings: NetworkConfig) -> Optional[float]:
    command = f"ping -c 1 -W {settings.ping_timeout} {shlex.quote(hostname)}"
    return parse_ping_output(executor.run(command, timeout=settings.ping_timeout + 2))


def http_latency(url: str, executor: Executor, settings: NetworkConfig) -> Optional[float]:
    command = (
        f"curl -o /dev/null -s -w '%{{time_connect}}' "
        f"--connect-timeout {settings.ping_timeout} --max-time {settings.ping_timeout} "
        f"{shlex.quote(url)}"
    )
    return parse_connect_time(executor.run(command, timeout=settings.ping_timeout + 2))


def measure_latency(candidate: CandidateServer, executor: Executor, settings: NetworkConfig) -> Optional[float]:
    hostname = candidate.hostname
    if hostname:
        latency = ping_latency(hostname, executor, settings)
        if latency is not None:
            return latency
        LOGGER.debug("ICMP probe to %s failed, trying HTTP connect time", hostname)

    if candidate.url:
        latency = http_latency(candidate.url, executor, settings)
        if latency is not None:
            return latency

    LOGGER.debug("Latency probe failed for server %s (%s)", candidate.id, candidate.label)
    return None


def probe_latencies(
    candidates: Sequence[CandidateServer],
    executor: Executor,
    settings: NetworkConfig,
    on_progress: Optional[Callable[[str], None]] = None,
) -> List[LatencyMeasurement]:
    """Probe each candidate one at a time; failed probes are kept with no latency."""
    measurements = []
    total = len(candidates)
    for index, candidate in enumerate(candidates, start=1):
        if on_progress:
            on_progress(f"Measuring latency {candidate.label} ({index}/{total})")
        measurements.append(LatencyMeasurement(candidate, measure_latency(candidate, executor, settings)))

    reachable = sum(1 for m in measurements if m.ok)
    LOGGER.info("Latency probed for %d servers (%d reachable)", total, reachable)
    return measurements
