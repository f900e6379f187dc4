"""Metrics registry for managing collectors and orchestrating collection"""
import threading
from typing import Dict, List
from .models import MetricFamily, MetricType
from collectors.base import BaseCollector
from logging_config import get_logger


logger = get_logger(__name__)

CLOUDWATCH_REQUESTS_TOTAL = "cloudwatch_requests_total"


class RequestCounter:
    """Thread-safe count of API requests made to CloudWatch"""

    def __init__(self):
        self._lock = threading.Lock()
        self._value = 0

    def inc(self, amount: int = 1) -> None:
        with self._lock:
            self._value += amount

    @property
    def value(self) -> int:
        with self._lock:
            return self._value

    def to_family(self) -> MetricFamily:
        return MetricFamily.single(
            CLOUDWATCH_REQUESTS_TOTAL,
            "API requests made to CloudWatch",
            self.value,
            MetricType.COUNTER,
        )


class MetricsRegistry:
    """Process-wide registry of collectors and shared exporter state"""

    def __init__(self, request_counter: RequestCounter = None):
        self.request_counter = request_counter or RequestCounter()
        self.collectors: Dict[str, BaseCollector] = {}

    def register_collector(self, collector: BaseCollector):
        """Register a new collector"""
        if not isinstance(collector, BaseCollector):
            raise ValueError("Collector must inherit from BaseCollector")

        self.collectors[collector.name] = collector
        logger.info(f"Registered collector: {collector.name}")

    def get_collector(self, name: str) -> BaseCollector:
        """Get collector by name"""
        return self.collectors.get(name)

    def list_collectors(self) -> List[str]:
        """List all registered collector names"""
        return list(self.collectors.keys())

    def collect_all(self) -> List[MetricFamily]:
        """Collect families from every collector plus the request counter"""
        families = []

        for name, collector in self.collectors.items():
            try:
                logger.debug("Collecting metrics", collector=name, event_type="collection_start")
                collected = collector.collect()
                families.extend(collected)
                logger.debug("Collected metrics", collector=name, families_count=len(collected), event_type="collection_complete")

            except Exception as e:
                logger.error("Collector failed", collector=name, error=str(e), event_type="collection_error", exc_info=True)
                # Continue with other collectors even if one fails

        families.append(self.request_counter.to_family())
        return families

    def get_collector_status(self) -> Dict[str, Dict]:
        """Get status information for all collectors"""
        return {
            name: {
                "class": collector.__class__.__name__,
                "help": collector.help_text,
            }
            for name, collector in self.collectors.items()
        }

