"""Per-rule scrape task"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional
from metrics.errors import RuleScrapeError
from metrics.models import MetricFamily, MetricType
from metrics.rules import MetricRule
from .dimensions import DimensionResolver
from .statistics import StatisticFetcher
from .samples import SampleSynthesizer
from logging_config import get_logger


logger = get_logger(__name__)


@dataclass
class RuleResult:
    """Outcome of scraping one rule"""
    rule: MetricRule
    families: List[MetricFamily] = field(default_factory=list)
    error: Optional[RuleScrapeError] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


class RuleScraper:
    """Scrapes every dimension combination of a rule, one after another"""

    def __init__(self, resolver: DimensionResolver, fetcher: StatisticFetcher,
                 synthesizer: SampleSynthesizer = None):
        self.resolver = resolver
        self.fetcher = fetcher
        self.synthesizer = synthesizer or SampleSynthesizer()

    def scrape(self, rule: MetricRule, now: datetime) -> RuleResult:
        """Scrape a rule; failures are captured in the result, never raised"""
        try:
            return RuleResult(rule, self._scrape(rule, now))
        except Exception as e:
            error = RuleScrapeError(rule, e)
            logger.error(
                "Rule scrape failed",
                namespace=rule.aws_namespace,
                metric_name=rule.aws_metric_name,
                error=str(e),
                event_type="rule_scrape_error",
                exc_info=True,
            )
            return RuleResult(rule, error=error)

    def _scrape(self, rule: MetricRule, now: datetime) -> List[MetricFamily]:
        # Keyed by statistic so each statistic becomes one family
        families: Dict[str, MetricFamily] = {}
        units: Dict[str, Optional[str]] = {}

        for combination in self.resolver.resolve(rule):
            datapoint = self.fetcher.fetch(rule, combination, now)
            if datapoint is None:
                continue
            for statistic, sample in self.synthesizer.synthesize(rule, combination, datapoint):
                family = families.get(statistic)
                if family is None:
                    family = families[statistic] = MetricFamily(sample.name, MetricType.GAUGE, "")
                family.samples.append(sample)
                units[statistic] = datapoint.unit

        for statistic, family in families.items():
            family.help_text = self.synthesizer.help_text(rule, statistic, units[statistic])
        return [family for family in families.values() if family.samples]
