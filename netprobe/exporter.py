"""CSV export helpers for stored server tests."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from pathlib import Path
from typing import Optional

from .config import AppConfig
from .db import NetworkRun, ServerTest, get_session


class CSVExporter:
    def __init__(self, config: AppConfig, session_factory):
        self.config = config
        self.Session = session_factory

    def build_csv(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> io.StringIO:
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(self._header())

        for row in self._iter_rows(start, end):
            writer.writerow(row)

        buffer.seek(0)
        return buffer

    def _header(self) -> list:
        return [
            "timestamp",
            "public_ip",
            "provider",
            "server",
            "location",
            "download_mbps",
            "upload_mbps",
            "latency_ms",
        ]

    def _iter_rows(self, start: Optional[datetime], end: Optional[datetime]):
        with get_session(self.Session) as session:
            query = (
                session.query(ServerTest, NetworkRun)
                .join(NetworkRun, ServerTest.run_id == NetworkRun.id)
                .order_by(NetworkRun.timestamp, NetworkRun.id, ServerTest.position)
            )
            if start:
                query = query.filter(NetworkRun.timestamp >= start)
            if end:
                query = query.filter(NetworkRun.timestamp <= end)
            for test, run in query.all():
                yield self._row_for_test(test, run)

    @staticmethod
    def _row_for_test(test: ServerTest, run: NetworkRun) -> list:
        cells = [test.download_mbps, test.upload_mbps, test.latency_ms]
        normalized = [CSVExporter._blank_if_none(value) for value in cells]
        return [
            run.timestamp.isoformat(),
            run.public_ip,
            run.provider,
            test.server,
            test.location,
            *normalized,
        ]

    @staticmethod
    def _blank_if_none(value):
        return "" if value is None else value

    def write_snapshot(self) -> Path:
        buffer = self.build_csv()
        target = self.config.paths.data_dir / self.config.export.csv_name
        target.write_text(buffer.getvalue(), encoding="utf-8")
        return target
