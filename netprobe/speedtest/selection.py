"""Geographically diverse server selection.

Selection runs four passes over the probed servers, each scanning groups in
priority order:

1. coverage: one server per group (best latency, or the first failed probe
   with a placeholder latency when nothing in the group answered)
2. round-robin: one more reachable server per group per sweep, up to the
   per-group cap
3. latency backfill: remaining reachable servers by latency, still capped
4. final backfill: remaining reachable servers by latency, uncapped

Passes only ever append, so earlier picks keep their position.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, List, Optional, Sequence

from .models import LatencyMeasurement, SelectedServer
from .regions import GROUP_PRIORITY, group_rank

LOGGER = logging.getLogger(__name__)

MAX_PER_GROUP = 4
PLACEHOLDER_LATENCY_MS = 999.0


def group_cap(max_servers: int, available_groups: int) -> int:
    if available_groups < 1:
        return 0
    return min(MAX_PER_GROUP, math.ceil(max_servers / available_groups) + 1)


def ordered_groups(groups, priority: Sequence[str] = GROUP_PRIORITY) -> List[str]:
    return sorted(set(groups), key=lambda group: (group_rank(group, priority), group))


def _by_latency(entries: Sequence[LatencyMeasurement]) -> List[LatencyMeasurement]:
    # sorted() is stable, so equal latencies keep probe order
    return sorted(entries, key=lambda entry: entry.latency_ms)


class _Selection:
    def __init__(self, max_servers: int, cap: int):
        self.max_servers = max_servers
        self.cap = cap
        self.servers: List[SelectedServer] = []
        self.ids = set()
        self.group_counts: Dict[str, int] = {}

    @property
    def full(self) -> bool:
        return len(self.servers) >= self.max_servers

    def count(self, group: str) -> int:
        return self.group_counts.get(group, 0)

    def has(self, entry: LatencyMeasurement) -> bool:
        return entry.server.id in self.ids

    def add(self, entry: LatencyMeasurement, latency_ms: Optional[float] = None, estimated: bool = False) -> None:
        server = entry.server
        self.servers.append(
            SelectedServer(
                server=server,
                latency_ms=entry.latency_ms if latency_ms is None else latency_ms,
                estimated=estimated,
            )
        )
        self.ids.add(server.id)
        self.group_counts[server.group] = self.count(server.group) + 1


def select_servers(
    measurements: Sequence[LatencyMeasurement],
    max_servers: int,
    priority: Sequence[str] = GROUP_PRIORITY,
    placeholder_latency_ms: float = PLACEHOLDER_LATENCY_MS,
) -> List[SelectedServer]:
    """Pick at most ``max_servers`` servers, covering every probed group first."""
    if max_servers < 1:
        raise ValueError("max_servers must be at least 1")

    reachable: Dict[str, List[LatencyMeasurement]] = {}
    failed: Dict[str, List[LatencyMeasurement]] = {}
    for entry in measurements:
        bucket = reachable if entry.ok else failed
        bucket.setdefault(entry.server.group, []).append(entry)
    for group, entries in reachable.items():
        reachable[group] = _by_latency(entries)

    groups = ordered_groups(list(reachable) + list(failed), priority)
    if not groups:
        return []

    cap = group_cap(max_servers, len(groups))
    selection = _Selection(max_servers, cap)

    for group in groups:
        if selection.full:
            break
        if reachable.get(group):
            selection.add(reachable[group][0])
        elif failed.get(group):
            selection.add(failed[group][0], latency_ms=placeholder_latency_ms, estimated=True)

    while not selection.full:
        added = False
        for group in groups:
            if selection.full:
                break
            if selection.count(group) >= cap:
                continue
            entry = next((e for e in reachable.get(group, []) if not selection.has(e)), None)
            if entry is not None:
                selection.add(entry)
                added = True
        if not added:
            break

    by_latency = _by_latency([entry for entry in measurements if entry.ok])

    for entry in by_latency:
        if selection.full:
            break
        if selection.has(entry) or selection.count(entry.server.group) >= cap:
            continue
        selection.add(entry)

    for entry in by_latency:
        if selection.full:
            break
        if not selection.has(entry):
            selection.add(entry)

    LOGGER.info(
        "Selected %d of %d probed servers across %d groups (cap %d per group)",
        len(selection.servers),
        len(measurements),
        len(groups),
        cap,
    )
    return selection.servers


def presentation_order(
    selected: Sequence[SelectedServer],
    priority: Sequence[str] = GROUP_PRIORITY,
) -> List[SelectedServer]:
    """Group priority, then country name, then latency."""
    return sorted(
        selected,
        key=lambda item: (
            group_rank(item.server.group, priority),
            item.server.country,
            item.latency_ms,
        ),
    )
