from netprobe.speedtest.executor import CommandExecutor


def test_returns_trimmed_stdout():
    assert CommandExecutor().run("printf '  hello \\n'") == "hello"


def test_non_zero_exit_is_no_data():
    assert CommandExecutor().run("echo partial; exit 3") == ""


def test_timeout_is_no_data():
    assert CommandExecutor().run("sleep 5; echo late", timeout=0.2) == ""


def test_missing_binary_is_no_data():
    assert CommandExecutor().run("definitely-not-a-real-binary-xyz") == ""
