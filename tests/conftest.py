"""Shared pytest configuration and fixtures."""

import logging
import time
from datetime import datetime, timedelta, timezone

import pytest

from puppetdb_exporter.collectors.puppetdb_collector import PuppetDBCollector
from puppetdb_exporter.collectors.schema import build_schema
from puppetdb_exporter.services.models import Node, ReportMetric
from puppetdb_exporter.services.puppetdb_client import PuppetDBError
from puppetdb_exporter.utils.logger import setup_logger


# Fixed "now" used by collector tests
NOW = datetime(2024, 1, 1, 1, 0, 0, tzinfo=timezone.utc)


class FakePuppetDB:
    """In-memory stand-in for PuppetDBClient."""

    def __init__(self, nodes=None, reports=None, nodes_error=None, report_errors=None):
        self._nodes = nodes or []
        self._reports = reports or {}
        self._nodes_error = nodes_error
        self._report_errors = report_errors or {}
        self.report_calls = []

    def nodes(self):
        if self._nodes_error:
            raise PuppetDBError(self._nodes_error)
        return list(self._nodes)

    def report_metrics(self, report_hash):
        self.report_calls.append(report_hash)
        if report_hash in self._report_errors:
            raise PuppetDBError(self._report_errors[report_hash])
        return list(self._reports.get(report_hash, []))


def make_node(certname, **fields):
    return Node(certname=certname, **fields)


def make_metric(category, name, value):
    return ReportMetric(category=category, name=name, value=value)


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test")


@pytest.fixture
def plain_logger():
    """Logger that propagates to the root logger, for caplog assertions."""
    return logging.getLogger("tests.puppetdb_exporter")


@pytest.fixture
def make_collector(logger):
    """Factory building a collector around a FakePuppetDB."""

    def _make(client, categories=("time",), unreported=timedelta(hours=2), now=NOW, log=None,
              timer=time.monotonic):
        return PuppetDBCollector(
            client=client,
            schema=build_schema(categories),
            categories=set(categories),
            unreported_duration=unreported,
            logger=log or logger,
            clock=lambda: now,
            timer=timer
        )

    return _make
