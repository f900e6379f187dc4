"""CloudWatch collector: runs every rule concurrently and merges the results"""
import time
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Dict, List
from collectors.base import BaseCollector
from metrics.errors import OrchestrationTimeout
from metrics.models import MetricFamily
from metrics.registry import RequestCounter
from metrics.rules import RuleSet
from utils.cloudwatch import CloudWatchClient
from .dimensions import DimensionResolver
from .statistics import StatisticFetcher
from .worker import RuleResult, RuleScraper
from logging_config import get_logger, log_scrape_completed


logger = get_logger(__name__)

SCRAPE_DURATION_SECONDS = "cloudwatch_exporter_scrape_duration_seconds"
SCRAPE_ERROR = "cloudwatch_exporter_scrape_error"

DEFAULT_WORKER_COUNT = 10
DEFAULT_SCRAPE_TIMEOUT = 300.0


@dataclass
class ScrapeResult:
    """Families produced by one scrape plus its summary"""
    families: List[MetricFamily]
    failed: bool
    duration_seconds: float


class CloudWatchCollector(BaseCollector):
    """Exports CloudWatch statistics for a set of metric rules"""

    def __init__(self, rules: RuleSet, client_factory: Callable[[], CloudWatchClient],
                 request_counter: RequestCounter,
                 worker_count: int = DEFAULT_WORKER_COUNT,
                 scrape_timeout: float = DEFAULT_SCRAPE_TIMEOUT,
                 clock: Callable[[], datetime] = None):
        super().__init__("cloudwatch", "CloudWatch metrics for the configured rules")
        self.rules = rules
        self.client_factory = client_factory
        self.request_counter = request_counter
        self.worker_count = worker_count
        self.scrape_timeout = scrape_timeout
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def collect(self) -> List[MetricFamily]:
        result = self.scrape()
        return result.families + [
            MetricFamily.single(
                SCRAPE_DURATION_SECONDS,
                "Time this CloudWatch scrape took, in seconds.",
                result.duration_seconds,
            ),
            MetricFamily.single(
                SCRAPE_ERROR,
                "Non-zero if this scrape failed.",
                1.0 if result.failed else 0.0,
            ),
        ]

    def scrape(self) -> ScrapeResult:
        """Scrape all rules, returning whatever succeeded even on failure"""
        start = time.perf_counter()
        families: List[MetricFamily] = []
        failed = False
        try:
            results, failed = self._run_rules()
            families = merge_families(result.families for result in results)
        except Exception as e:
            failed = True
            logger.warning("CloudWatch scrape failed", error=str(e), event_type="scrape_error", exc_info=True)

        duration = time.perf_counter() - start
        log_scrape_completed(logger, len(families), duration, failed)
        return ScrapeResult(families, failed, duration)

    def _run_rules(self):
        client = self.client_factory()
        now = self.clock()
        scraper = RuleScraper(
            DimensionResolver(client, self.request_counter),
            StatisticFetcher(client, self.request_counter),
        )
        executor = ThreadPoolExecutor(max_workers=self.worker_count, thread_name_prefix="cloudwatch_rule")
        try:
            futures = [executor.submit(scraper.scrape, rule, now) for rule in self.rules.metrics]
            done, pending = wait(futures, timeout=self.scrape_timeout)
        finally:
            # Rules still running are left to finish in the background
            executor.shutdown(wait=False, cancel_futures=True)

        results: List[RuleResult] = [f.result() for f in futures if f in done]
        failed = any(result.failed for result in results)
        if pending:
            failed = True
            error = OrchestrationTimeout(len(pending), self.scrape_timeout)
            logger.warning(str(error), pending=len(pending), event_type="scrape_timeout")
        else:
            close = getattr(client, "close", None)
            if close:
                close()
        return results, failed


def merge_families(family_lists) -> List[MetricFamily]:
    """Merge families of the same name, keeping first-seen order and help text"""
    merged: Dict[str, MetricFamily] = {}
    for families in family_lists:
        for family in families:
            existing = merged.get(family.name)
            if existing is None:
                merged[family.name] = MetricFamily(
                    family.name, family.metric_type, family.help_text, list(family.samples)
                )
            else:
                existing.samples.extend(family.samples)
    return list(merged.values())
