"""Persistence of benchmark runs."""

from __future__ import annotations

import json
import logging
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import selectinload, sessionmaker

from .db import NetworkRun, ServerTest, get_session
from .speedtest.models import NetworkResult, format_mbps

LOGGER = logging.getLogger(__name__)


class ResultStore:
    def __init__(self, session_factory: sessionmaker):
        self.Session = session_factory

    def save(self, result: NetworkResult) -> NetworkRun:
        with get_session(self.Session) as session:
            record = NetworkRun(
                timestamp=result.timestamp,
                public_ip=result.public_ip,
                provider=result.provider,
                location=result.location,
                warnings_json=json.dumps(list(result.warnings)),
                duration_seconds=result.duration_seconds,
            )
            for position, test in enumerate(result.tests):
                record.tests.append(
                    ServerTest(
                        position=position,
                        server=test.server,
                        location=test.location,
                        download_mbps=test.download_mbps,
                        upload_mbps=test.upload_mbps,
                        latency_ms=test.latency_ms,
                    )
                )
            session.add(record)
            session.flush()
            LOGGER.info(
                "Stored network run at %s (%d servers)",
                result.timestamp.isoformat(),
                len(result.tests),
            )
            return record

    def get_runs(self, limit: Optional[int] = None) -> List[NetworkRun]:
        """Most recent runs first."""
        with get_session(self.Session) as session:
            query = (
                session.query(NetworkRun)
                .options(selectinload(NetworkRun.tests))
                .order_by(desc(NetworkRun.timestamp), desc(NetworkRun.id))
            )
            if limit:
                query = query.limit(limit)
            return query.all()

    def latest(self) -> Optional[NetworkRun]:
        runs = self.get_runs(limit=1)
        return runs[0] if runs else None

    def to_dict(self, run: NetworkRun) -> dict:
        return {
            "id": run.id,
            "timestamp": run.timestamp.isoformat(),
            "publicIp": run.public_ip,
            "provider": run.provider,
            "location": run.location,
            "warnings": json.loads(run.warnings_json or "[]"),
            "durationSeconds": round(run.duration_seconds or 0.0, 1),
            "tests": [
                {
                    "server": test.server,
                    "location": test.location,
                    "download": format_mbps(test.download_mbps),
                    "upload": format_mbps(test.upload_mbps),
                    "latency": f"{test.latency_ms:.2f} ms",
                }
                for test in run.tests
            ],
        }
