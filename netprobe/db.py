"""Database utilities and ORM models for local run history."""

from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, List, Optional

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship, sessionmaker


class Base(DeclarativeBase):
    pass


class NetworkRun(Base):
    __tablename__ = "network_runs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    public_ip: Mapped[str] = mapped_column(String(64))
    provider: Mapped[str] = mapped_column(String(255))
    location: Mapped[str] = mapped_column(String(255))
    warnings_json: Mapped[str] = mapped_column(Text, default="[]")
    duration_seconds: Mapped[float] = mapped_column(Float, default=0.0)

    tests: Mapped[List["ServerTest"]] = relationship(
        "ServerTest",
        back_populates="run",
        order_by="ServerTest.position",
        cascade="all, delete-orphan",
    )


class ServerTest(Base):
    __tablename__ = "server_tests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(ForeignKey("network_runs.id"), index=True)
    position: Mapped[int] = mapped_column(Integer)
    server: Mapped[str] = mapped_column(String(255))
    location: Mapped[str] = mapped_column(String(255))
    download_mbps: Mapped[float] = mapped_column(Float)
    upload_mbps: Mapped[Optional[float]] = mapped_column(Float)
    latency_ms: Mapped[float] = mapped_column(Float)

    run: Mapped[NetworkRun] = relationship("NetworkRun", back_populates="tests")


def init_db(data_dir: Path) -> sessionmaker:
    db_path = data_dir / "netprobe.db"
    engine = create_engine(f"sqlite:///{db_path}", future=True)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, future=True, expire_on_commit=False)


@contextmanager
def get_session(Session: sessionmaker) -> Iterator:
    session = Session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
