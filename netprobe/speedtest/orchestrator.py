"""End-to-end network benchmark: discovery, probing, selection, measurement."""

from __future__ import annotations

import logging
import time
from typing import Callable, List, Optional, Sequence

import requests

from ..config import GeoIPConfig, NetworkConfig
from .bandwidth import measure_download, measure_upload
from .discovery import fetch_candidates
from .executor import CommandExecutor, Executor
from .geoip import resolve_host_identity
from .latency import pick_probe_candidates, probe_latencies
from .models import HostIdentity, NetworkResult, SelectedServer, SpeedTestResult
from .regions import SEARCH_REGIONS, resolve_priority
from .selection import presentation_order, select_servers

LOGGER = logging.getLogger(__name__)

NO_SERVERS_WARNING = "Could not fetch servers from the speed-test directory"

ResultCallback = Callable[[SpeedTestResult], None]
ProgressCallback = Callable[[str], None]


class NetworkBenchmark:
    def __init__(
        self,
        network: Optional[NetworkConfig] = None,
        geoip: Optional[GeoIPConfig] = None,
        executor: Optional[Executor] = None,
        session: Optional[requests.Session] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.network = network or NetworkConfig()
        self.geoip = geoip or GeoIPConfig()
        self.executor = executor or CommandExecutor(self.network.command_timeout)
        self.session = session or requests.Session()
        self.clock = clock

    @property
    def regions(self) -> Sequence[str]:
        return tuple(self.network.regions) or SEARCH_REGIONS

    @property
    def priority(self) -> Sequence[str]:
        return resolve_priority(self.network.group_priority)

    def run(
        self,
        max_servers: Optional[int] = None,
        on_result: Optional[ResultCallback] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> NetworkResult:
        """Run the full benchmark; network failures only ever shrink ``tests``."""
        max_servers = self.network.max_servers if max_servers is None else max_servers
        if max_servers < 1:
            raise ValueError("max_servers must be at least 1")

        started = self.clock()
        progress = on_progress or (lambda message: None)

        progress("Detecting network")
        identity = resolve_host_identity(self.session, self.geoip)

        progress("Fetching server list")
        candidates = fetch_candidates(self.regions, self.executor, self.network)
        if not candidates:
            LOGGER.warning(NO_SERVERS_WARNING)
            return self._result(identity, [], [NO_SERVERS_WARNING], self.clock() - started)

        to_probe = pick_probe_candidates(candidates, self.network.per_group_probe)
        measurements = probe_latencies(to_probe, self.executor, self.network, progress)

        selected = select_servers(
            measurements,
            max_servers,
            priority=self.priority,
            placeholder_latency_ms=self.network.placeholder_latency_ms,
        )
        ordered = presentation_order(selected, self.priority)

        warnings: List[str] = []
        tests = self._measure_all(ordered, started, warnings, on_result, progress)
        elapsed = self.clock() - started
        LOGGER.info(
            "Network benchmark finished: %d of %d servers measured in %.1fs",
            len(tests),
            len(ordered),
            elapsed,
        )
        return self._result(identity, tests, warnings, elapsed)

    def _deadline_passed(self, started: float) -> bool:
        deadline = self.network.deadline_seconds
        return deadline is not None and self.clock() - started >= deadline

    def _measure_all(
        self,
        servers: Sequence[SelectedServer],
        started: float,
        warnings: List[str],
        on_result: Optional[ResultCallback],
        progress: ProgressCallback,
    ) -> List[SpeedTestResult]:
        tests: List[SpeedTestResult] = []
        total = len(servers)
        for index, selected in enumerate(servers, start=1):
            if self._deadline_passed(started):
                message = f"Deadline reached, skipped {total - index + 1} remaining servers"
                LOGGER.warning(message)
                warnings.append(message)
                break

            progress(f"Testing {selected.server.label} ({index}/{total})")
            result = self.measure_server(selected)
            if result is None:
                continue
            tests.append(result)
            if on_result:
                on_result(result)
        return tests

    def measure_server(self, selected: SelectedServer) -> Optional[SpeedTestResult]:
        """Download then upload against one server; None when the download failed."""
        server = selected.server
        download = measure_download(server.url, self.executor, self.network)
        if download <= 0:
            LOGGER.debug("Skipping %s: download not measurable", server.label)
            return None

        upload = measure_upload(server.url, self.executor, self.network)
        return SpeedTestResult(
            server=server.label,
            location=server.location,
            download_mbps=download,
            upload_mbps=upload,
            latency_ms=selected.latency_ms,
        )

    @staticmethod
    def _result(identity: HostIdentity, tests, warnings, duration_seconds: float) -> NetworkResult:
        return NetworkResult(
            public_ip=identity.ip,
            provider=identity.provider,
            location=identity.location,
            tests=tuple(tests),
            warnings=tuple(warnings),
            duration_seconds=duration_seconds,
        )


def run_network_benchmark(
    max_servers: int = 20,
    on_result: Optional[ResultCallback] = None,
    on_progress: Optional[ProgressCallback] = None,
    network: Optional[NetworkConfig] = None,
    geoip: Optional[GeoIPConfig] = None,
    executor: Optional[Executor] = None,
    session: Optional[requests.Session] = None,
) -> NetworkResult:
    benchmark = NetworkBenchmark(network=network, geoip=geoip, executor=executor, session=session)
    return benchmark.run(max_servers, on_result=on_result, on_progress=on_progress)
