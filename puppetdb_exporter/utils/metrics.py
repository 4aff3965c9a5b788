"""Metric data structures for collectors."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and label schema of one metric kind."""

    name: str
    help: str
    labels: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Sample:
    """One observation emitted by a collector during a scrape."""

    descriptor: MetricDescriptor
    value: float
    labels: Tuple[str, ...] = ()
    error: Optional[str] = None  # Set on invalid samples only

    @classmethod
    def invalid(cls, descriptor: MetricDescriptor, error: str) -> "Sample":
        """Sample signalling that ``descriptor`` could not be collected."""
        return cls(descriptor=descriptor, value=float("nan"), error=error)

    @property
    def is_valid(self) -> bool:
        return self.error is None


@dataclass
class NodeResult:
    """Outcome of processing a single node during a scrape."""

    certname: str
    samples: List[Sample] = field(default_factory=list)
    statuses: List[str] = field(default_factory=list)  # Aggregate increments
    skipped: bool = False
    reason: Optional[str] = None
    errors: List[str] = field(default_factory=list)

    @classmethod
    def skip(cls, certname: str, reason: str) -> "NodeResult":
        """Result for a node that contributes nothing to the scrape."""
        return cls(certname=certname, skipped=True, reason=reason)


def format_metric_name(name: str) -> str:
    """
    Turn a report metric name into its display form.

    ``total_time`` becomes ``Total Time``. Only the first character of each
    word is changed.

    Args:
        name: Raw metric name from a Puppet report

    Returns:
        str: Display name used as the ``name`` label
    """
    return " ".join(word[:1].upper() + word[1:] for word in name.split("_"))
