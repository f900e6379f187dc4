"""Thin CloudWatch API adapter built on boto3"""
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
import boto3
from botocore.config import Config as BotoConfig
from logging_config import get_logger


logger = get_logger(__name__)

# Datapoint field -> statistic name used in the GetMetricStatistics request
DATAPOINT_STATISTICS = {
    "Sum": "sum",
    "SampleCount": "sample_count",
    "Minimum": "minimum",
    "Maximum": "maximum",
    "Average": "average",
}


@dataclass(frozen=True)
class Dimension:
    """One dimension binding of a CloudWatch metric"""
    name: str
    value: str

    def to_api(self) -> Dict[str, str]:
        return {"Name": self.name, "Value": self.value}


DimensionCombination = Tuple[Dimension, ...]


@dataclass
class Datapoint:
    """One period bucket returned by GetMetricStatistics"""
    timestamp: datetime
    sum: Optional[float] = None
    sample_count: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    average: Optional[float] = None
    extended_statistics: Dict[str, float] = field(default_factory=dict)
    unit: Optional[str] = None

    @classmethod
    def from_api(cls, raw: Dict) -> "Datapoint":
        """Build a datapoint from a boto3 response entry"""
        values = {attr: raw.get(key) for key, attr in DATAPOINT_STATISTICS.items()}
        return cls(
            timestamp=raw["Timestamp"],
            extended_statistics=dict(raw.get("ExtendedStatistics") or {}),
            unit=raw.get("Unit"),
            **values,
        )


@dataclass
class ListMetricsPage:
    """One page of ListMetrics results"""
    combinations: List[DimensionCombination]
    next_token: Optional[str] = None


def _proxy_settings() -> Dict[str, str]:
    proxies = {}
    for scheme in ("http", "https"):
        value = os.environ.get(f"{scheme}_proxy") or os.environ.get(f"{scheme.upper()}_PROXY")
        if value:
            proxies[scheme] = value
    return proxies


class CloudWatchClient:
    """Wraps a boto3 CloudWatch client and converts its responses"""

    def __init__(self, client):
        self._client = client

    @classmethod
    def create(cls, region: str, role_arn: Optional[str] = None,
               max_connections: int = 150) -> "CloudWatchClient":
        """Create a client for one scrape, assuming ``role_arn`` when given"""
        boto_config = BotoConfig(
            region_name=region,
            max_pool_connections=max_connections,
            retries={"mode": "standard"},
            proxies=_proxy_settings() or None,
        )
        session = boto3.session.Session()
        if role_arn:
            sts = session.client("sts", region_name=region, config=boto_config)
            credentials = sts.assume_role(
                RoleArn=role_arn, RoleSessionName="cloudwatch_exporter"
            )["Credentials"]
            session = boto3.session.Session(
                aws_access_key_id=credentials["AccessKeyId"],
                aws_secret_access_key=credentials["SecretAccessKey"],
                aws_session_token=credentials["SessionToken"],
            )
            logger.debug("Assumed role for CloudWatch", role_arn=role_arn, event_type="assume_role")
        return cls(session.client("cloudwatch", config=boto_config))

    def list_metrics(self, namespace: str, metric_name: str,
                     dimension_names: Sequence[str],
                     next_token: Optional[str] = None) -> ListMetricsPage:
        """Fetch one page of metrics carrying the given dimension names"""
        params = {
            "Namespace": namespace,
            "MetricName": metric_name,
            "Dimensions": [{"Name": name} for name in dimension_names],
        }
        if next_token:
            params["NextToken"] = next_token
        response = self._client.list_metrics(**params)
        combinations = [
            tuple(Dimension(d["Name"], d["Value"]) for d in metric.get("Dimensions", []))
            for metric in response.get("Metrics", [])
        ]
        return ListMetricsPage(combinations, response.get("NextToken"))

    def get_metric_statistics(self, namespace: str, metric_name: str,
                              dimensions: Sequence[Dimension],
                              statistics: Sequence[str],
                              extended_statistics: Sequence[str],
                              start_time: datetime, end_time: datetime,
                              period: int) -> List[Datapoint]:
        """Fetch the datapoints of one dimension combination"""
        params = {
            "Namespace": namespace,
            "MetricName": metric_name,
            "Dimensions": [d.to_api() for d in dimensions],
            "StartTime": start_time,
            "EndTime": end_time,
            "Period": period,
        }
        if statistics:
            params["Statistics"] = list(statistics)
        if extended_statistics:
            params["ExtendedStatistics"] = list(extended_statistics)
        response = self._client.get_metric_statistics(**params)
        return [Datapoint.from_api(raw) for raw in response.get("Datapoints", [])]

    def close(self) -> None:
        """Release the underlying HTTP connection pool"""
        close = getattr(self._client, "close", None)
        if close:
            close()
