"""Tests for BaseCollector class."""

import logging

import pytest

from puppetdb_exporter.collectors.base import BaseCollector
from puppetdb_exporter.collectors.schema import build_schema


class MockCollector(BaseCollector):
    """Mock collector for testing BaseCollector functionality."""

    def __init__(self, schema=None, logger=None):
        if logger is None:
            logger = logging.getLogger(__name__)
        super().__init__(schema if schema is not None else build_schema([]), logger)

    def collect(self):
        """Mock collect method."""
        return iter([])


class TestBaseCollector:
    """Test suite for BaseCollector."""

    def test_describe_yields_schema_descriptors(self):
        schema = build_schema(["time"])
        collector = MockCollector(schema)

        assert list(collector.describe()) == list(schema.values())

    def test_invalid_samples_cover_schema(self):
        schema = build_schema(["time", "events"])
        collector = MockCollector(schema)

        samples = list(collector._invalid_samples("boom"))

        assert [s.descriptor for s in samples] == list(schema.values())
        assert all(s.error == "boom" for s in samples)
        assert not any(s.is_valid for s in samples)

    def test_collector_logger_hierarchy(self):
        parent_logger = logging.getLogger("test_parent")
        collector = MockCollector(logger=parent_logger)

        assert collector.logger.parent == parent_logger
        assert collector.logger.name == "test_parent.MockCollector"

    def test_collect_must_be_implemented(self):
        with pytest.raises(TypeError):
            BaseCollector(build_schema([]), logging.getLogger(__name__))
