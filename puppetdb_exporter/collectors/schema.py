"""Metric descriptors published by the PuppetDB collector."""

from types import MappingProxyType
from typing import Iterable, Mapping

from ..utils.metrics import MetricDescriptor

NODE_LAST_REPORT_STATUS = "node_last_report_status"
NODE_REPORT_STATUS_COUNT = "node_report_status_count"
REPORT = "report"
COLLECT_DURATION = "collect_duration"


def category_key(category: str) -> str:
    """Schema key of the descriptor for a report metric category."""
    return f"report_{category}"


def build_schema(categories: Iterable[str]) -> Mapping[str, MetricDescriptor]:
    """
    Build the descriptors emitted on every scrape.

    Four descriptors are always present; each category adds a
    ``report_<category>`` descriptor labelled by metric name, environment
    and host.

    Args:
        categories: Enabled report metric categories

    Returns:
        Mapping[str, MetricDescriptor]: Read-only mapping of schema key to descriptor
    """
    descriptors = {
        NODE_LAST_REPORT_STATUS: MetricDescriptor(
            name="puppetdb_node_last_report_status",
            help="Last report status for a node by type",
            labels=("status", "host"),
        ),
        NODE_REPORT_STATUS_COUNT: MetricDescriptor(
            name="puppetdb_node_report_status_count",
            help="Total count of reports status by type",
            labels=("status",),
        ),
        REPORT: MetricDescriptor(
            name="puppet_report",
            help="Timestamp of latest report",
            labels=("environment", "host", "deactivated"),
        ),
        COLLECT_DURATION: MetricDescriptor(
            name="puppetdb_exporter_collect_duration",
            help="Time taken to talk to puppetdb and generate metrics in microseconds",
        ),
    }

    for category in sorted({c for c in categories if c}):
        key = category_key(category)
        descriptors[key] = MetricDescriptor(
            name=f"puppet_{key}",
            help=f"Total count of {category} per status",
            labels=("name", "environment", "host"),
        )

    return MappingProxyType(descriptors)
