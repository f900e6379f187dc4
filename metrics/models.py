"""Metric data models for Prometheus exposition"""
from dataclasses import dataclass, field
from typing import List
from enum import Enum


class MetricType(Enum):
    """Prometheus metric types"""
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass
class Sample:
    """Single labelled observation within a metric family"""
    name: str
    label_names: List[str]
    label_values: List[str]
    value: float

    def __post_init__(self):
        if len(self.label_names) != len(self.label_values):
            raise ValueError(
                f"Sample {self.name} has {len(self.label_names)} label names "
                f"but {len(self.label_values)} label values"
            )

    @property
    def labels(self):
        """Labels as an ordered name -> value mapping"""
        return dict(zip(self.label_names, self.label_values))


@dataclass
class MetricFamily:
    """Group of same-named samples sharing one help text and type"""
    name: str
    metric_type: MetricType
    help_text: str
    samples: List[Sample] = field(default_factory=list)

    @classmethod
    def single(cls, name: str, help_text: str, value: float,
               metric_type: MetricType = MetricType.GAUGE) -> "MetricFamily":
        """Family holding exactly one unlabelled sample"""
        return cls(name, metric_type, help_text, [Sample(name, [], [], float(value))])
