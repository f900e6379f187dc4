"""Name normalisation for exported metric and label names"""
import re

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9:_]")
_UNDERSCORE_RUNS = re.compile(r"__+")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def safe_name(name: str) -> str:
    """Replace characters Prometheus does not allow and merge underscores"""
    return _UNDERSCORE_RUNS.sub("_", _UNSAFE_CHARS.sub("_", name))


def to_snake_case(name: str) -> str:
    """Convert a CamelCase CloudWatch name to snake_case.

    ``RequestCount`` becomes ``request_count`` and ``CPUUtilization`` becomes
    ``cpu_utilization``.
    """
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    return _CASE_BOUNDARY.sub(r"\1_\2", name).lower()
