"""Exceptions raised by the CloudWatch exporter"""


class ExporterError(Exception):
    """Base class for exporter errors"""


class ConfigurationError(ExporterError, ValueError):
    """Rule file or rule definition is malformed"""


class RuleScrapeError(ExporterError):
    """Scraping a single rule failed"""

    def __init__(self, rule, cause: BaseException):
        self.rule = rule
        self.cause = cause
        super().__init__(
            f"Failed to scrape {rule.aws_namespace}/{rule.aws_metric_name}: {cause}"
        )


class OrchestrationTimeout(ExporterError):
    """Not every rule finished before the scrape timeout elapsed"""

    def __init__(self, pending: int, timeout: float):
        self.pending = pending
        self.timeout = timeout
        super().__init__(f"{pending} rule(s) still running after {timeout}s")
