"""Declarative metric rules and the YAML rule-file loader"""
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple, Union
import yaml
from pydantic import BaseModel, Field, ValidationError, root_validator, validator
from .errors import ConfigurationError

DEFAULT_PERIOD_SECONDS = 60
DEFAULT_RANGE_SECONDS = 600
DEFAULT_DELAY_SECONDS = 600

BASE_STATISTICS = ("Sum", "SampleCount", "Minimum", "Maximum", "Average")


class MetricRule(BaseModel):
    """One CloudWatch metric to export

    Rules are shared by every worker thread of a scrape, so collection
    fields are tuples and the select mappings are read-only views.
    """

    aws_namespace: str = Field(..., min_length=1, description="CloudWatch namespace, e.g. AWS/ELB")
    aws_metric_name: str = Field(..., min_length=1, description="CloudWatch metric name")
    aws_statistics: Tuple[str, ...] = Field(default=(), description="Base statistics to fetch")
    aws_extended_statistics: Tuple[str, ...] = Field(default=(), description="Percentile statistics to fetch")
    aws_dimensions: Tuple[str, ...] = Field(default=(), description="Dimension names to query")
    aws_dimension_select: Optional[Mapping[str, Tuple[str, ...]]] = Field(default=None, description="Allowed dimension values")
    aws_dimension_select_regex: Optional[Mapping[str, Tuple[str, ...]]] = Field(default=None, description="Allowed dimension value patterns")
    period_seconds: int = Field(default=DEFAULT_PERIOD_SECONDS, ge=1, description="Statistics period")
    range_seconds: int = Field(default=DEFAULT_RANGE_SECONDS, ge=1, description="Width of the query window")
    delay_seconds: int = Field(default=DEFAULT_DELAY_SECONDS, ge=0, description="Lag of the window behind now")
    help: Optional[str] = Field(default=None, description="Custom help text")

    class Config:
        extra = "forbid"
        frozen = True

    def __init__(self, **data):
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid metric rule: {e}") from e

    @root_validator(pre=True)
    def check_rule(cls, values):
        """Reject conflicting selectors and apply the default statistics"""
        if not isinstance(values, dict):
            return values
        if values.get("aws_dimension_select") is not None and values.get("aws_dimension_select_regex") is not None:
            raise ValueError("Must not provide aws_dimension_select and aws_dimension_select_regex at the same time")
        if not values.get("aws_statistics") and not values.get("aws_extended_statistics"):
            values = dict(values, aws_statistics=BASE_STATISTICS)
        return values

    @validator("aws_statistics")
    def validate_statistics(cls, v):
        for statistic in v:
            if statistic not in BASE_STATISTICS:
                raise ValueError(f"Unknown statistic {statistic!r}, expected one of {', '.join(BASE_STATISTICS)}")
        return v

    @validator("aws_dimension_select_regex")
    def validate_patterns(cls, v):
        if v is None:
            return v
        for dimension, patterns in v.items():
            for pattern in patterns:
                try:
                    re.compile(pattern)
                except re.error as e:
                    raise ValueError(f"Invalid regex {pattern!r} for dimension {dimension}: {e}")
        return v

    @validator("aws_dimension_select", "aws_dimension_select_regex")
    def freeze_select(cls, v):
        return None if v is None else MappingProxyType(dict(v))

    @property
    def has_dimension_filter(self) -> bool:
        return self.aws_dimension_select is not None or self.aws_dimension_select_regex is not None


class RuleSet(BaseModel):
    """Rule file contents: region, default timing and the list of rules"""

    region: str = Field(..., min_length=1, description="AWS region to query")
    role_arn: Optional[str] = Field(default=None, description="IAM role to assume for CloudWatch calls")
    period_seconds: int = Field(default=DEFAULT_PERIOD_SECONDS, ge=1)
    range_seconds: int = Field(default=DEFAULT_RANGE_SECONDS, ge=1)
    delay_seconds: int = Field(default=DEFAULT_DELAY_SECONDS, ge=0)
    metrics: List[MetricRule] = Field(..., min_length=1, description="Metric rules")

    class Config:
        extra = "forbid"
        frozen = True

    @root_validator(pre=True)
    def inherit_defaults(cls, values):
        """Fill each rule's missing timing settings from the rule-set defaults"""
        if not isinstance(values, dict) or not isinstance(values.get("metrics"), list):
            return values
        defaults = {
            key: values[key]
            for key in ("period_seconds", "range_seconds", "delay_seconds")
            if values.get(key) is not None
        }
        metrics = []
        for rule in values["metrics"]:
            if isinstance(rule, dict):
                rule = {**defaults, **rule}
            metrics.append(rule)
        return dict(values, metrics=metrics)

    @classmethod
    def from_dict(cls, data: Any) -> "RuleSet":
        """Build a validated rule set, raising ConfigurationError on any problem"""
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Rule file must contain a mapping at the top level")
        try:
            return cls(**data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid rule configuration: {e}") from e


def load_rules(path: Union[str, Path]) -> RuleSet:
    """Load and validate a YAML rule file"""
    path = Path(path)
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigurationError(f"Cannot read rule file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse rule file {path}: {e}") from e
    return RuleSet.from_dict(data)
