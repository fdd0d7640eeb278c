"""
Metrics Collection for API Catalog

Prometheus counters and histograms for ingestion, embedding and search.
The HTTP exporter is started only when telemetry is enabled.

Example Usage:
    from api_catalog.metrics import MetricsManager

    metrics = MetricsManager()
    metrics.increment_counter("operations_ingested", labels={"action": "inserted"})
    metrics.observe_value("embedding_latency", 0.12)
"""

import logging
import threading
from typing import Dict, Optional

from prometheus_client import Counter, Histogram, start_http_server

from .config import config

logger = logging.getLogger(__name__)


class MetricsManager:
    """Metrics manager."""

    _instance = None
    _server_started = False
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        """Initialize metrics manager."""
        if not hasattr(self, "initialized"):
            self.port = config.metrics_port
            self.initialized = False
            self.counters: Dict[str, Counter] = {}
            self.histograms: Dict[str, Histogram] = {}

    def initialize(self) -> None:
        """Register metrics and start the exporter if telemetry is on."""
        with self._lock:
            if self.initialized:
                return
            self._start_server()
            self._initialize_metrics()
            self.initialized = True

    def _start_server(self) -> None:
        if config.enable_telemetry and not self._server_started:
            try:
                start_http_server(self.port)
                MetricsManager._server_started = True
                logger.info(f"Started Prometheus metrics server on port {self.port}")
            except OSError as e:
                if e.errno == 98:  # Address already in use
                    MetricsManager._server_started = True
                    logger.info(f"Metrics server already running on port {self.port}")
                else:
                    raise

    def _initialize_metrics(self) -> None:
        """Initialize metrics."""
        # Counters
        self.counters["operations_ingested"] = Counter(
            "catalog_operations_ingested_total",
            "Total number of OpenAPI operations stored in the catalog",
            ["action"],
        )
        self.counters["ingestion_errors"] = Counter(
            "catalog_ingestion_errors_total",
            "Total number of operations that failed ingestion",
            ["phase"],
        )
        self.counters["embeddings_generated"] = Counter(
            "catalog_embeddings_generated_total",
            "Total number of embeddings generated",
        )
        self.counters["embedding_errors"] = Counter(
            "catalog_embedding_errors_total",
            "Total number of embedding errors",
        )
        self.counters["searches_performed"] = Counter(
            "catalog_searches_performed_total",
            "Total number of catalog queries",
            ["mode", "scope"],
        )

        # Histograms
        self.histograms["embedding_latency"] = Histogram(
            "catalog_embedding_latency_seconds",
            "Embedding latency in seconds",
        )

    def increment_counter(
        self, name: str, value: int = 1, labels: Optional[Dict] = None
    ) -> None:
        """Increment counter.

        Args:
            name: Counter name
            value: Value to increment by
            labels: Counter labels
        """
        if not self.initialized:
            self.initialize()

        counter = self.counters.get(name)
        if counter is None:
            logger.error(f"Counter {name} not found")
            return

        if labels:
            counter.labels(**labels).inc(value)
        else:
            counter.inc(value)

    def observe_value(self, name: str, value: float) -> None:
        """Observe histogram value.

        Args:
            name: Histogram name
            value: Value to observe
        """
        if not self.initialized:
            self.initialize()

        histogram = self.histograms.get(name)
        if histogram is None:
            logger.error(f"Histogram {name} not found")
            return

        histogram.observe(value)
