"""Shared fixtures: an in-memory stand-in for the CloudWatch API"""
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional
import pytest

from metrics.registry import RequestCounter
from metrics.rules import MetricRule
from utils.cloudwatch import Datapoint, Dimension, ListMetricsPage

NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def dims(*pairs):
    """Build a dimension combination from (name, value) pairs"""
    return tuple(Dimension(name, value) for name, value in pairs)


def datapoint(minutes_ago: int = 0, unit: Optional[str] = "Count", **values) -> Datapoint:
    extended = values.pop("extended_statistics", {})
    return Datapoint(
        timestamp=NOW - timedelta(minutes=minutes_ago),
        extended_statistics=extended,
        unit=unit,
        **values,
    )


class FakeCloudWatchClient:
    """Serves canned ListMetrics pages and datapoints, recording every call"""

    def __init__(self, pages: Dict[str, List[ListMetricsPage]] = None,
                 datapoints: Dict[tuple, List[Datapoint]] = None,
                 failing_metrics=()):
        self.pages = pages or {}
        self.datapoints = datapoints or {}
        self.failing_metrics = set(failing_metrics)
        self.list_calls = []
        self.statistics_calls = []
        self.closed = False

    def list_metrics(self, namespace, metric_name, dimension_names, next_token=None):
        self.list_calls.append((namespace, metric_name, list(dimension_names), next_token))
        if metric_name in self.failing_metrics:
            raise RuntimeError(f"ListMetrics failed for {metric_name}")
        pages = self.pages.get(metric_name, [ListMetricsPage([])])
        index = int(next_token) if next_token else 0
        return pages[index]

    def get_metric_statistics(self, namespace, metric_name, dimensions, statistics,
                              extended_statistics, start_time, end_time, period):
        self.statistics_calls.append({
            "namespace": namespace,
            "metric_name": metric_name,
            "dimensions": tuple(dimensions),
            "statistics": list(statistics),
            "extended_statistics": list(extended_statistics),
            "start_time": start_time,
            "end_time": end_time,
            "period": period,
        })
        if metric_name in self.failing_metrics:
            raise RuntimeError(f"GetMetricStatistics failed for {metric_name}")
        return list(self.datapoints.get((metric_name, tuple(dimensions)), []))

    def close(self):
        self.closed = True


@pytest.fixture
def counter():
    return RequestCounter()


@pytest.fixture
def elb_rule():
    return MetricRule(
        aws_namespace="AWS/ELB",
        aws_metric_name="RequestCount",
        aws_dimensions=["AvailabilityZone", "LoadBalancerName"],
    )
