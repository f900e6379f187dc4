"""Conversion of CloudWatch datapoints into Prometheus samples"""
from typing import List, Optional, Tuple
from metrics.models import Sample
from metrics.naming import safe_name, to_snake_case
from metrics.rules import MetricRule
from utils.cloudwatch import DATAPOINT_STATISTICS, Datapoint, DimensionCombination

DYNAMODB_NAMESPACE = "AWS/DynamoDB"
DYNAMODB_INDEX_DIMENSION = "GlobalSecondaryIndexName"

# DynamoDB reports these per table and per global secondary index under the
# same metric name, so the index variant gets its own exported name.
DYNAMODB_INDEX_METRICS = frozenset([
    "ConsumedReadCapacityUnits",
    "ConsumedWriteCapacityUnits",
    "ProvisionedReadCapacityUnits",
    "ProvisionedWriteCapacityUnits",
    "ReadThrottleEvents",
    "WriteThrottleEvents",
])


def base_name(rule: MetricRule) -> str:
    """Exported name prefix shared by all statistics of a rule"""
    name = safe_name(rule.aws_namespace.lower() + "_" + to_snake_case(rule.aws_metric_name))
    if (rule.aws_namespace == DYNAMODB_NAMESPACE
            and DYNAMODB_INDEX_DIMENSION in rule.aws_dimensions
            and rule.aws_metric_name in DYNAMODB_INDEX_METRICS):
        name += "_index"
    return name


def job_name(rule: MetricRule) -> str:
    return safe_name(rule.aws_namespace.lower())


class SampleSynthesizer:
    """Builds the samples and help text exported for a rule"""

    def synthesize(self, rule: MetricRule, combination: DimensionCombination,
                   datapoint: Datapoint) -> List[Tuple[str, Sample]]:
        """Return (statistic name, sample) pairs for one datapoint"""
        prefix = base_name(rule)
        label_names = ["job", "instance"]
        label_values = [job_name(rule), ""]
        for dimension in combination:
            label_names.append(safe_name(to_snake_case(dimension.name)))
            label_values.append(dimension.value)

        samples = []
        for statistic, attr in DATAPOINT_STATISTICS.items():
            value = getattr(datapoint, attr)
            if value is None:
                continue
            samples.append((statistic, Sample(
                f"{prefix}_{attr}", list(label_names), list(label_values), float(value)
            )))
        for statistic, value in datapoint.extended_statistics.items():
            if value is None:
                continue
            samples.append((statistic, Sample(
                f"{prefix}_{safe_name(to_snake_case(statistic))}",
                list(label_names), list(label_values), float(value),
            )))
        return samples

    def help_text(self, rule: MetricRule, statistic: str, unit: Optional[str]) -> str:
        if rule.help is not None:
            return rule.help
        dimensions = "[" + ", ".join(rule.aws_dimensions) + "]"
        return (
            f"{rule.aws_namespace} {rule.aws_metric_name} Dimensions: {dimensions} "
            f"Statistic: {statistic} Unit: {unit}"
        )
