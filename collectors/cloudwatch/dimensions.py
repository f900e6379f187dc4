"""Discovery of the dimension combinations a rule should be scraped for"""
import re
from functools import lru_cache
from typing import Dict, List, Optional
from metrics.registry import RequestCounter
from metrics.rules import MetricRule
from utils.cloudwatch import DimensionCombination
from logging_config import get_logger


logger = get_logger(__name__)


@lru_cache(maxsize=512)
def _compile(pattern: str):
    return re.compile(pattern)


def regex_list_match(patterns: List[str], value: str) -> bool:
    """True if ``value`` fully matches at least one pattern"""
    return any(_compile(pattern).fullmatch(value) for pattern in patterns)


def _passes(combination: DimensionCombination, select: Dict[str, List[str]], matches) -> bool:
    for dimension in combination:
        allowed = select.get(dimension.name)
        if allowed is not None and not matches(allowed, dimension.value):
            return False
    return True


def use_combination(rule: MetricRule, combination: DimensionCombination) -> bool:
    """Apply the rule's aws_dimension_select or aws_dimension_select_regex filter"""
    if rule.aws_dimension_select is not None:
        return _passes(combination, rule.aws_dimension_select, lambda allowed, value: value in allowed)
    if rule.aws_dimension_select_regex is not None:
        return _passes(combination, rule.aws_dimension_select_regex, regex_list_match)
    return True


class DimensionResolver:
    """Lists the dimension combinations CloudWatch has for a rule"""

    def __init__(self, client, request_counter: RequestCounter):
        self.client = client
        self.request_counter = request_counter

    def resolve(self, rule: MetricRule) -> List[DimensionCombination]:
        if not rule.aws_dimensions:
            return [()]

        combinations = []
        expected = len(rule.aws_dimensions)
        next_token: Optional[str] = None
        pages = 0
        while True:
            page = self.client.list_metrics(
                rule.aws_namespace, rule.aws_metric_name, rule.aws_dimensions, next_token
            )
            self.request_counter.inc()
            pages += 1
            for combination in page.combinations:
                # ListMetrics also returns metrics carrying extra dimensions
                if len(combination) != expected:
                    continue
                if use_combination(rule, combination):
                    combinations.append(tuple(combination))
            next_token = page.next_token
            if not next_token:
                break

        logger.debug(
            "Resolved dimensions",
            namespace=rule.aws_namespace,
            metric_name=rule.aws_metric_name,
            pages=pages,
            combinations=len(combinations),
            event_type="dimensions_resolved",
        )
        return combinations
