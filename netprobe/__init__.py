"""Application bootstrap helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import AppConfig, load_config
from .db import init_db
from .exporter import CSVExporter
from .logging_setup import configure_logging
from .speedtest.orchestrator import NetworkBenchmark
from .store import ResultStore

__version__ = "1.0.0"


class ApplicationContext:
    """Holds shared singletons for one CLI invocation."""

    def __init__(self, config: AppConfig, console_log_level: Optional[str] = None):
        self.config = config
        configure_logging(config, console_log_level)
        self.Session = init_db(config.paths.data_dir)
        self.store = ResultStore(self.Session)
        self.exporter = CSVExporter(config, self.Session)
        self.benchmark = NetworkBenchmark(network=config.network, geoip=config.geoip)


def bootstrap(config_path: Optional[str] = None, console_log_level: Optional[str] = None) -> ApplicationContext:
    """Load configuration and wire dependencies."""

    config_file = Path(config_path).resolve() if config_path else None
    config = load_config(str(config_file)) if config_file else load_config()
    return ApplicationContext(config, console_log_level)
