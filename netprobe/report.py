"""Console and text rendering of network benchmark results."""

from __future__ import annotations

import json
import socket
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional, TextIO

from .speedtest.models import NetworkResult, SpeedTestResult

DIVIDER = "═" * 80
RULE = "─" * 70


def _fit(text: str, width: int) -> str:
    return text[:width].ljust(width + 1)


def table_header() -> str:
    return (
        f"  {'Server'.ljust(21)} {'Location'.ljust(15)} "
        f"{'Download'.rjust(11)} {'Upload'.rjust(11)} {'Latency'.rjust(10)}\n"
        f"  {RULE}"
    )


def table_row(test: SpeedTestResult) -> str:
    return (
        f"  {_fit(test.server, 20)} {_fit(test.location, 14)} "
        f"↓{test.download.rjust(10)} ↑{test.upload.rjust(10)} {test.latency.rjust(10)}"
    )


def host_info(result: NetworkResult) -> str:
    return "\n".join(
        [
            f"  Public IP   {result.public_ip}",
            f"  Provider    {result.provider}",
            f"  Location    {result.location}",
        ]
    )


class ConsoleReporter:
    """Live view: progress line on a TTY plus one table row per finished server."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout
        self._progress_width = 0

    @property
    def interactive(self) -> bool:
        return bool(getattr(self.stream, "isatty", lambda: False)())

    def header(self) -> None:
        self.stream.write(table_header() + "\n")
        self.stream.flush()

    def progress(self, message: str) -> None:
        if not self.interactive:
            return
        line = f"  {message}..."
        self.stream.write("\r" + line.ljust(self._progress_width))
        self._progress_width = len(line)
        self.stream.flush()

    def clear_progress(self) -> None:
        if self.interactive and self._progress_width:
            self.stream.write("\r" + " " * self._progress_width + "\r")
            self._progress_width = 0
            self.stream.flush()

    def row(self, test: SpeedTestResult) -> None:
        self.clear_progress()
        self.stream.write(table_row(test) + "\n")
        self.stream.flush()

    def summary(self, result: NetworkResult) -> None:
        self.clear_progress()
        for warning in result.warnings:
            self.stream.write(f"  ! {warning}\n")
        self.stream.write("\n" + host_info(result) + "\n")
        self.stream.flush()


def generate_text_report(result: NetworkResult, hostname: str) -> str:
    lines: List[str] = [
        DIVIDER,
        f"  NETWORK SPEED REPORT - {hostname}",
        f"  {result.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC",
        DIVIDER,
        "",
        f"  Public IP : {result.public_ip}",
        f"  Provider  : {result.provider}",
        f"  Location  : {result.location}",
        f"  Duration  : {result.duration_seconds:.0f}s",
        "",
        f"  {'Server'.ljust(22)} {'Location'.ljust(18)} {'Down'.ljust(12)} {'Up'.ljust(12)} Latency",
        "  " + "─" * 76,
    ]
    for test in result.tests:
        lines.append(
            f"  {test.server[:21].ljust(22)} {test.location[:17].ljust(18)} "
            f"{test.download.ljust(12)} {test.upload.ljust(12)} {test.latency}"
        )
    if not result.tests:
        lines.append("  No servers could be measured.")
    for warning in result.warnings:
        lines.append(f"  Warning: {warning}")
    lines.extend(["", DIVIDER])
    return "\n".join(lines) + "\n"


def write_text_report(result: NetworkResult, data_dir: Path, hostname: Optional[str] = None) -> Path:
    hostname = hostname or socket.gethostname() or "server"
    stamp = result.timestamp.strftime("%Y-%m-%dT%H-%M-%S")
    target = data_dir / f"netprobe-{hostname}-{stamp}.txt"
    target.write_text(generate_text_report(result, hostname), encoding="utf-8")
    return target


def render_json(result: NetworkResult) -> str:
    return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)


def format_history(runs: List[dict]) -> str:
    if not runs:
        return "  No stored runs."
    lines = []
    for run in runs:
        stamp = datetime.fromisoformat(run["timestamp"]).strftime("%Y-%m-%d %H:%M:%S")
        lines.append(f"  #{run['id']} {stamp}  {run['publicIp']}  {run['provider']}  ({len(run['tests'])} servers)")
        for test in run["tests"]:
            lines.append(
                f"      {test['server'][:20].ljust(21)} {test['download'].rjust(10)} "
                f"{test['upload'].rjust(10)} {test['latency'].rjust(10)}"
            )
    return "\n".join(lines)
