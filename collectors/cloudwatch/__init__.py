"""CloudWatch scrape engine"""
from .collector import CloudWatchCollector, ScrapeResult
from .dimensions import DimensionResolver
from .statistics import StatisticFetcher
from .samples import SampleSynthesizer
from .worker import RuleResult, RuleScraper

__all__ = [
    'CloudWatchCollector',
    'ScrapeResult',
    'DimensionResolver',
    'StatisticFetcher',
    'SampleSynthesizer',
    'RuleResult',
    'RuleScraper'
]
