"""Prometheus text exposition format renderer"""
import math
from typing import Iterable, List
from ..models import MetricFamily, Sample

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


def _escape_help(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\n", "\\n")


def _escape_label_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def format_value(value: float) -> str:
    """Format a sample value the way Prometheus parses it"""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    return repr(float(value))


class PrometheusExporter:
    """Render metric families in Prometheus text format"""

    def render_sample(self, sample: Sample) -> str:
        labels_str = ""
        if sample.label_names:
            label_pairs = [
                f'{name}="{_escape_label_value(value)}"'
                for name, value in zip(sample.label_names, sample.label_values)
            ]
            labels_str = "{" + ",".join(label_pairs) + "}"

        return f"{sample.name}{labels_str} {format_value(sample.value)}"

    def render(self, families: Iterable[MetricFamily]) -> str:
        lines: List[str] = []
        for family in families:
            lines.append(f"# HELP {family.name} {_escape_help(family.help_text)}")
            lines.append(f"# TYPE {family.name} {family.metric_type.value}")
            for sample in family.samples:
                lines.append(self.render_sample(sample))
        lines.append("")  # Final newline
        return "\n".join(lines)
