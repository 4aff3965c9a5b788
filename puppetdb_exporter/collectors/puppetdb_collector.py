"""PuppetDB node and report collector."""

import re
import time
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Mapping, Optional, Protocol, Sequence, Set
import logging

from ..services.models import Node, ReportMetric
from ..services.puppetdb_client import PuppetDBError
from ..utils.metrics import MetricDescriptor, NodeResult, Sample, format_metric_name
from ..utils.status import UNREPORTED, deactivated_label, resolve_status
from .base import BaseCollector
from .schema import (
    COLLECT_DURATION,
    NODE_LAST_REPORT_STATUS,
    NODE_REPORT_STATUS_COUNT,
    REPORT,
    category_key,
)

REPORT_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Zero-padded fields, optional fraction of up to nanosecond precision
_REPORT_TIMESTAMP = re.compile(r"^(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})(?:\.\d{1,9})?Z$")


class NodeSource(Protocol):
    """Read operations the collector needs from PuppetDB."""

    def nodes(self) -> Sequence[Node]: ...

    def report_metrics(self, report_hash: str) -> Sequence[ReportMetric]: ...


def parse_report_timestamp(value: str) -> datetime:
    """
    Parse a PuppetDB report timestamp.

    Fractional seconds are accepted and dropped.

    Args:
        value: Timestamp in ``YYYY-MM-DDTHH:MM:SSZ`` form

    Returns:
        datetime: Timezone-aware UTC datetime

    Raises:
        ValueError: If the timestamp doesn't match the format
    """
    match = _REPORT_TIMESTAMP.match(value)
    if match is None:
        raise ValueError(f"timestamp {value!r} does not match YYYY-MM-DDTHH:MM:SSZ")
    parsed = datetime.strptime(match.group(1), REPORT_TIMESTAMP_FORMAT)
    return parsed.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PuppetDBCollector(BaseCollector):
    """Collector turning PuppetDB nodes and report metrics into samples."""

    def __init__(
        self,
        client: NodeSource,
        schema: Mapping[str, MetricDescriptor],
        categories: Set[str],
        unreported_duration: timedelta,
        logger: logging.Logger,
        clock: Optional[Callable[[], datetime]] = None,
        timer: Callable[[], float] = time.monotonic
    ):
        """
        Initialize PuppetDB collector.

        Args:
            client: PuppetDB client
            schema: Descriptors built by ``build_schema`` for ``categories``
            categories: Report metric categories to export
            unreported_duration: Age after which a report counts as unreported
            logger: Logger instance
            clock: Returns the current UTC time, defaults to the wall clock
            timer: Monotonic seconds used to time the scrape
        """
        super().__init__(schema, logger)
        self.client = client
        self.categories = frozenset(categories)
        self.unreported_duration = unreported_duration
        self._now = clock or _utcnow
        self._timer = timer

    def collect(self) -> Iterator[Sample]:
        """
        Scrape PuppetDB once.

        Yields per-node samples as nodes are processed, then one status count
        per observed status and finally the collection duration. If the node
        list cannot be fetched, only invalid samples are yielded.

        Yields:
            Sample: Samples for this scrape
        """
        collect_start = self._timer()

        try:
            nodes = self.client.nodes()
        except PuppetDBError as e:
            self.logger.error(f"Failed to list nodes: {e}")
            yield from self._invalid_samples(str(e))
            return

        statuses: Counter = Counter()
        skipped = 0

        for node in nodes:
            result = self._process_node(node)
            if result.skipped:
                skipped += 1
                self.logger.error(f"Skipping node {result.certname}: {result.reason}")
                continue

            for error in result.errors:
                self.logger.error(f"Node {result.certname}: {error}")

            statuses.update(result.statuses)
            yield from result.samples

        status_count = self.schema[NODE_REPORT_STATUS_COUNT]
        for status_name, count in statuses.items():
            yield Sample(status_count, count, (status_name,))

        duration_us = int((self._timer() - collect_start) * 1_000_000)
        self.logger.debug(
            f"Collected {len(nodes)} nodes ({skipped} skipped) in {duration_us}us"
        )
        yield Sample(self.schema[COLLECT_DURATION], duration_us)

    def _process_node(self, node: Node) -> NodeResult:
        """
        Derive the samples and status increments of one node.

        Args:
            node: Node from the node list

        Returns:
            NodeResult: Samples and statuses, or a skip with its reason
        """
        result = NodeResult(certname=node.certname)
        deactivated = deactivated_label(node.deactivated)

        if not node.report_timestamp:
            result.statuses.append(UNREPORTED)
            return result

        try:
            latest_report = parse_report_timestamp(node.report_timestamp)
        except ValueError as e:
            return NodeResult.skip(node.certname, f"failed to parse report timestamp: {e}")

        result.samples.append(Sample(
            self.schema[REPORT],
            int(latest_report.timestamp()),
            (node.report_environment, node.certname, deactivated)
        ))

        if self._now() - latest_report > self.unreported_duration:
            result.statuses.append(UNREPORTED)

        status = resolve_status(node.latest_report_status)
        result.statuses.append(status)
        result.samples.append(Sample(
            self.schema[NODE_LAST_REPORT_STATUS],
            1,
            (status, node.certname)
        ))

        if node.latest_report_hash:
            self._collect_report_metrics(node, result)

        return result

    def _collect_report_metrics(self, node: Node, result: NodeResult) -> None:
        """Append samples for the configured categories of a node's latest report."""
        try:
            report_metrics = self.client.report_metrics(node.latest_report_hash)
        except PuppetDBError as e:
            result.errors.append(f"failed to fetch report metrics: {e}")
            return

        seen = set()
        for metric in report_metrics:
            if metric.category not in self.categories:
                continue

            # One series per label set; keep the first value
            display_name = format_metric_name(metric.name)
            if (metric.category, display_name) in seen:
                continue
            seen.add((metric.category, display_name))

            result.samples.append(Sample(
                self.schema[category_key(metric.category)],
                metric.value,
                (display_name, node.report_environment, node.certname)
            ))
