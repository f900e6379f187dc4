"""Time-windowed statistic retrieval for one dimension combination"""
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple
from metrics.registry import RequestCounter
from metrics.rules import MetricRule
from utils.cloudwatch import Datapoint, DimensionCombination


def query_window(rule: MetricRule, now: datetime) -> Tuple[datetime, datetime]:
    """Return (start, end) where end = now - delay and start = end - range"""
    end = now - timedelta(seconds=rule.delay_seconds)
    start = end - timedelta(seconds=rule.range_seconds)
    return start, end


def newest_datapoint(datapoints: Iterable[Datapoint]) -> Optional[Datapoint]:
    """Latest datapoint by timestamp; the first one wins a tie"""
    newest = None
    for datapoint in datapoints:
        if newest is None or datapoint.timestamp > newest.timestamp:
            newest = datapoint
    return newest


class StatisticFetcher:
    """Fetches the newest datapoint of a rule for one combination"""

    def __init__(self, client, request_counter: RequestCounter):
        self.client = client
        self.request_counter = request_counter

    def fetch(self, rule: MetricRule, combination: DimensionCombination,
              now: datetime) -> Optional[Datapoint]:
        start, end = query_window(rule, now)
        datapoints = self.client.get_metric_statistics(
            rule.aws_namespace,
            rule.aws_metric_name,
            combination,
            rule.aws_statistics,
            rule.aws_extended_statistics,
            start,
            end,
            rule.period_seconds,
        )
        self.request_counter.inc()
        return newest_datapoint(datapoints)
