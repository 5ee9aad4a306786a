import json
import logging
import threading
import time

from netprobe.config import NetworkConfig
from netprobe.speedtest.discovery import directory_query_url, fetch_candidates, parse_directory_payload

from .conftest import server_payload


def test_query_url_encodes_search_term_and_limit():
    url = directory_query_url(NetworkConfig(), "Ho Chi Minh")
    assert url == "https://www.speedtest.net/api/js/servers?engine=js&limit=3&search=Ho%20Chi%20Minh"


def test_overlapping_regions_are_deduplicated_first_seen_wins(fake_executor, network_settings):
    fake_executor.respond("search=Tokyo", json.dumps([server_payload(1, "Japan"), server_payload(2, "Japan")]))
    fake_executor.respond("search=Seoul", json.dumps([server_payload(2, "Japan"), server_payload(3, "South Korea")]))

    servers = fetch_candidates(["Tokyo", "Seoul"], fake_executor, network_settings)

    assert [s.id for s in servers] == ["1", "2", "3"]
    assert servers[1].region == "Tokyo"
    assert servers[1].country == "Japan"


def test_failed_regions_yield_nothing_without_aborting_batch(fake_executor, network_settings):
    fake_executor.respond("search=London", "<html>rate limited</html>")
    fake_executor.respond("search=Paris", json.dumps({"error": "bad"}))
    fake_executor.respond("search=Madrid", json.dumps([server_payload(7, "Spain"), {"name": "no id"}]))

    servers = fetch_candidates(["London", "Paris", "Madrid", "Milan"], fake_executor, network_settings)

    assert [s.id for s in servers] == ["7"]
    assert len(fake_executor.matching("search=")) == 4


def test_batches_cover_every_region_in_order(fake_executor):
    regions = ["A", "B", "C", "D", "E"]
    for index, region in enumerate(regions):
        fake_executor.respond(f"search={region}", json.dumps([server_payload(index, "Germany")]))

    servers = fetch_candidates(regions, fake_executor, NetworkConfig(batch_size=2))

    assert [s.id for s in servers] == ["0", "1", "2", "3", "4"]
    assert [s.region for s in servers] == regions


def test_region_query_logs_servers_outside_the_searched_group(fake_executor, network_settings, caplog):
    fake_executor.respond("search=Tokyo", json.dumps([server_payload(1, "Japan"), server_payload(2, "Germany")]))

    with caplog.at_level(logging.DEBUG, logger="netprobe.speedtest.discovery"):
        servers = fetch_candidates(["Tokyo"], fake_executor, network_settings)

    assert [s.region_group for s in servers] == ["East Asia", "East Asia"]
    assert [s.group for s in servers] == ["East Asia", "Europe"]
    assert "Region Tokyo returned 2 servers, 1 outside its group" in caplog.text


def test_curl_command_carries_timeouts(fake_executor, network_settings):
    fetch_candidates(["Tokyo"], fake_executor, network_settings)
    (command,) = fake_executor.commands
    assert "--connect-timeout 3" in command
    assert "--max-time 5" in command


def test_parse_payload_rejects_garbage():
    assert parse_directory_payload("", "Tokyo") == []
    assert parse_directory_payload("not json", "Tokyo") == []
    assert parse_directory_payload("42", "Tokyo") == []


class SlowCountingExecutor:
    """Sleeps on every call and records how many calls overlap."""

    def __init__(self, delay=0.1):
        self.delay = delay
        self.active = 0
        self.peak = 0
        self.events = []
        self._lock = threading.Lock()

    def run(self, command, timeout=None):
        region = command.rsplit("search=", 1)[1].rstrip("'")
        with self._lock:
            self.active += 1
            self.peak = max(self.peak, self.active)
            self.events.append(("start", region))
        time.sleep(self.delay)
        with self._lock:
            self.active -= 1
            self.events.append(("end", region))
        return json.dumps([server_payload(region.lstrip("R"), "Germany")])


def test_regions_within_a_batch_run_concurrently_and_batches_do_not_overlap():
    regions = [f"R{i}" for i in range(12)]
    executor = SlowCountingExecutor()

    servers = fetch_candidates(regions, executor, NetworkConfig(batch_size=5))

    assert executor.peak == 5
    assert [s.region for s in servers] == regions
    position = {event: index for index, event in enumerate(executor.events)}
    batches = [regions[0:5], regions[5:10], regions[10:12]]
    for current, following in zip(batches, batches[1:]):
        last_end = max(position[("end", region)] for region in current)
        first_start = min(position[("start", region)] for region in following)
        assert last_end < first_start
