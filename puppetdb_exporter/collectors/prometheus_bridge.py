"""Adapter exposing collectors through prometheus_client."""

from typing import Dict, Iterator
import logging

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from ..utils.metrics import MetricDescriptor
from .base import BaseCollector


class ScrapeError(Exception):
    """Raised when a scrape produced invalid samples."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = errors
        details = "; ".join(f"{name}: {error}" for name, error in sorted(errors.items()))
        super().__init__(f"{len(errors)} metrics failed to collect: {details}")


def _family(descriptor: MetricDescriptor) -> GaugeMetricFamily:
    return GaugeMetricFamily(descriptor.name, descriptor.help, labels=list(descriptor.labels))


class PrometheusBridge(Collector):
    """
    Custom prometheus_client collector backed by a ``BaseCollector``.

    Every sample is exported as a gauge. Invalid samples fail the whole
    scrape with ``ScrapeError`` so the HTTP layer can answer with an error
    instead of serving a partial exposition.
    """

    def __init__(self, collector: BaseCollector, logger: logging.Logger):
        self._collector = collector
        self.logger = logger.getChild(self.__class__.__name__)

    def describe(self) -> Iterator[Metric]:
        for descriptor in self._collector.describe():
            yield _family(descriptor)

    def collect(self) -> Iterator[Metric]:
        families: Dict[str, GaugeMetricFamily] = {}
        errors: Dict[str, str] = {}

        for sample in self._collector.collect():
            name = sample.descriptor.name
            if not sample.is_valid:
                errors[name] = sample.error
                continue
            if name not in families:
                families[name] = _family(sample.descriptor)
            families[name].add_metric(list(sample.labels), float(sample.value))

        if errors:
            self.logger.warning(f"Scrape failed for {len(errors)} metrics")
            raise ScrapeError(errors)

        yield from families.values()
