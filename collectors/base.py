"""Base collector interface"""
from abc import ABC, abstractmethod
from typing import List
from metrics.models import MetricFamily


class BaseCollector(ABC):
    """Anything that produces metric families on demand"""

    def __init__(self, name: str = "", help_text: str = ""):
        self._name = name
        self._help_text = help_text

    @abstractmethod
    def collect(self) -> List[MetricFamily]:
        """Collect metrics and return list of MetricFamily objects"""
        pass

    @property
    def name(self) -> str:
        """Collector name for identification"""
        return self._name

    @property
    def help_text(self) -> str:
        """Help text describing what this collector does"""
        return self._help_text or f"{self.name} metrics collector"
