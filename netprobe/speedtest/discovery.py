"""Speed-test server discovery through the public server directory."""

from __future__ import annotations

import json
import logging
import shlex
from concurrent.futures import ThreadPoolExecutor
from typing import List, Sequence
from urllib.parse import quote

from ..config import NetworkConfig
from .executor import Executor
from .models import CandidateServer

LOGGER = logging.getLogger(__name__)


def directory_query_url(settings: NetworkConfig, region: str) -> str:
    separator = "&" if "?" in settings.directory_url else "?"
    return (
        f"{settings.directory_url}{separator}limit={settings.directory_limit}"
        f"&search={quote(region)}"
    )


def parse_directory_payload(raw: str, region: str) -> List[CandidateServer]:
    """Turn a directory response into candidates; anything malformed yields nothing."""
    if not raw:
        return []
    try:
        payload = json.loads(raw)
    except ValueError:
        LOGGER.debug("Directory response for %s is not JSON", region)
        return []
    if not isinstance(payload, list):
        LOGGER.debug("Directory response for %s is not a list", region)
        return []

    servers = []
    for entry in payload:
        if not isinstance(entry, dict) or entry.get("id") in (None, ""):
            continue
        servers.append(CandidateServer.from_payload(entry, region))
    return servers


def query_region(region: str, executor: Executor, settings: NetworkConfig) -> List[CandidateServer]:
    url = directory_query_url(settings, region)
    command = (
        f"curl -s --connect-timeout {settings.directory_connect_timeout} "
        f"--max-time {settings.directory_max_time} {shlex.quote(url)}"
    )
    raw = executor.run(command, timeout=settings.directory_max_time + 5)
    servers = parse_directory_payload(raw, region)
    outside = sum(1 for server in servers if server.group != server.region_group)
    LOGGER.debug("Region %s returned %d servers, %d outside its group", region, len(servers), outside)
    return servers


def fetch_candidates(
    regions: Sequence[str],
    executor: Executor,
    settings: NetworkConfig,
) -> List[CandidateServer]:
    """Query every region in concurrent batches and dedupe by server ID.

    Batches run one after another; within a batch each region fills its own
    list and the lists are merged in region order once the batch completes.
    """
    servers: List[CandidateServer] = []
    seen_ids = set()
    batch_size = max(1, settings.batch_size)

    for start in range(0, len(regions), batch_size):
        batch = list(regions[start:start + batch_size])
        with ThreadPoolExecutor(max_workers=len(batch)) as pool:
            futures = [pool.submit(query_region, region, executor, settings) for region in batch]
            batch_results = []
            for region, future in zip(batch, futures):
                try:
                    batch_results.append(future.result())
                except Exception as exc:  # pylint: disable=broad-except
                    LOGGER.debug("Region %s query failed: %s", region, exc)
                    batch_results.append([])

        for region_servers in batch_results:
            for server in region_servers:
                if server.id in seen_ids:
                    continue
                seen_ids.add(server.id)
                servers.append(server)

    LOGGER.info("Discovered %d unique servers across %d regions", len(servers), len(regions))
    return servers
