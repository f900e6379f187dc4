"""Tests for the metrics registry and request counter"""
import threading
import pytest

from collectors.base import BaseCollector
from metrics.models import MetricFamily, MetricType
from metrics.registry import CLOUDWATCH_REQUESTS_TOTAL, MetricsRegistry, RequestCounter


class StaticCollector(BaseCollector):
    """Collector returning a fixed family"""

    def __init__(self, name="static", value=1.0):
        super().__init__(name, "Static collector for testing")
        self.value = value

    def collect(self):
        return [MetricFamily.single(f"{self.name}_value", "Static value", self.value)]


class BrokenCollector(BaseCollector):
    """Collector that always raises"""

    def __init__(self):
        super().__init__("broken")

    def collect(self):
        raise RuntimeError("boom")


class TestRequestCounter:
    """Test the shared CloudWatch request counter"""

    def test_increment(self):
        counter = RequestCounter()
        counter.inc()
        counter.inc(2)

        assert counter.value == 3

    def test_concurrent_increments(self):
        counter = RequestCounter()

        def work():
            for _ in range(1000):
                counter.inc()

        threads = [threading.Thread(target=work) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert counter.value == 4000

    def test_family(self):
        counter = RequestCounter()
        counter.inc(5)

        family = counter.to_family()

        assert family.name == CLOUDWATCH_REQUESTS_TOTAL
        assert family.metric_type == MetricType.COUNTER
        assert family.samples[0].value == 5.0


class TestMetricsRegistry:
    """Test collector registration and collection"""

    def setup_method(self):
        self.registry = MetricsRegistry()

    def test_register_collector(self):
        self.registry.register_collector(StaticCollector())

        assert self.registry.list_collectors() == ["static"]
        assert isinstance(self.registry.get_collector("static"), StaticCollector)

    def test_register_rejects_non_collector(self):
        with pytest.raises(ValueError):
            self.registry.register_collector(object())

    def test_collect_all_appends_request_counter(self):
        self.registry.register_collector(StaticCollector())
        self.registry.request_counter.inc()

        names = [family.name for family in self.registry.collect_all()]

        assert names == ["static_value", CLOUDWATCH_REQUESTS_TOTAL]

    def test_failing_collector_isolated(self):
        self.registry.register_collector(BrokenCollector())
        self.registry.register_collector(StaticCollector())

        names = [family.name for family in self.registry.collect_all()]

        assert names == ["static_value", CLOUDWATCH_REQUESTS_TOTAL]

    def test_collector_status(self):
        self.registry.register_collector(StaticCollector())

        assert self.registry.get_collector_status() == {
            "static": {"class": "StaticCollector", "help": "Static collector for testing"}
        }
