import pytest

from netprobe.speedtest.bandwidth import download_url, measure_download, measure_upload, parse_speed


def test_download_url_replaces_upload_endpoint():
    assert download_url("http://s1.example.net:8080/speedtest/upload.php") == (
        "http://s1.example.net:8080/speedtest/random4000x4000.jpg"
    )
    assert download_url("http://s1.example.net/") == "http://s1.example.net/random4000x4000.jpg"


def test_parse_speed_converts_bytes_per_second_to_mbps():
    assert parse_speed("12500000.000") == pytest.approx(100.0)
    assert parse_speed("0.000") is None
    assert parse_speed("") is None


def test_measure_download(fake_executor, network_settings):
    fake_executor.respond(("speed_download", "random4000x4000.jpg"), "6250000")

    assert measure_download("http://s1.example.net/speedtest/upload.php", fake_executor, network_settings) == (
        pytest.approx(50.0)
    )
    (command,) = fake_executor.commands
    assert "--connect-timeout 5" in command
    assert "--max-time 15" in command


def test_unmeasurable_download_is_zero(fake_executor, network_settings):
    assert measure_download("http://s1.example.net/speedtest/upload.php", fake_executor, network_settings) == 0.0


def test_measure_upload_posts_random_block(fake_executor, network_settings):
    fake_executor.respond("speed_upload", "2500000")

    mbps = measure_upload("http://s1.example.net/speedtest/upload.php", fake_executor, network_settings)

    assert mbps == pytest.approx(20.0)
    (command,) = fake_executor.commands
    assert command.startswith("dd if=/dev/urandom bs=256K count=4")
    assert "-X POST" in command
    assert "http://s1.example.net/speedtest/upload.php" in command


def test_failed_upload_is_none(fake_executor, network_settings):
    assert measure_upload("http://s1.example.net/speedtest/upload.php", fake_executor, network_settings) is None
