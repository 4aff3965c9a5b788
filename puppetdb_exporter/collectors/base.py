"""Base collector abstract class."""

from abc import ABC, abstractmethod
from typing import Iterator, Mapping
import logging

from ..utils.metrics import MetricDescriptor, Sample


class BaseCollector(ABC):
    """Abstract base class for collectors feeding the metrics sink."""

    def __init__(self, schema: Mapping[str, MetricDescriptor], logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            schema: Descriptors this collector emits, keyed by schema key
            logger: Logger instance
        """
        self.schema = schema
        self.logger = logger.getChild(self.__class__.__name__)

    def describe(self) -> Iterator[MetricDescriptor]:
        """Yield every descriptor the collector may emit."""
        yield from self.schema.values()

    @abstractmethod
    def collect(self) -> Iterator[Sample]:
        """
        Run one scrape and yield its samples.

        Yields:
            Sample: Valid samples, or one invalid sample per descriptor when
            the scrape as a whole failed
        """

    def _invalid_samples(self, error: str) -> Iterator[Sample]:
        for descriptor in self.schema.values():
            yield Sample.invalid(descriptor, error)
