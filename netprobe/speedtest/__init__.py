"""Multi-server network speed test."""

from .models import (
    CandidateServer,
    HostIdentity,
    LatencyMeasurement,
    NetworkResult,
    SelectedServer,
    SpeedTestResult,
)
from .orchestrator import NetworkBenchmark, run_network_benchmark

__all__ = [
    "CandidateServer",
    "HostIdentity",
    "LatencyMeasurement",
    "NetworkBenchmark",
    "NetworkResult",
    "SelectedServer",
    "SpeedTestResult",
    "run_network_benchmark",
]
