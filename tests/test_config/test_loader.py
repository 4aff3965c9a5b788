"""Tests for configuration loading and source precedence."""

from datetime import timedelta

import pytest
import yaml
from pydantic import ValidationError

from puppetdb_exporter.config.loader import ConfigLoader
from puppetdb_exporter.config.settings import Settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep exporter variables from the outer environment out of the tests."""
    for env_var in Settings.ENV_VARS.values():
        monkeypatch.delenv(env_var, raising=False)


@pytest.fixture
def config_file(tmp_path):
    def _write(data):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump(data) if not isinstance(data, str) else data)
        return str(path)

    return _write


def test_load_yaml_file(config_file):
    path = config_file({
        "puppetdb_url": "https://puppetdb:8081",
        "categories": ["time", "events"],
        "unreported_node": "4h",
    })

    config = ConfigLoader.load(path)

    assert config.puppetdb_url == "https://puppetdb:8081"
    assert config.categories == frozenset({"time", "events"})
    assert config.unreported_node == timedelta(hours=4)


def test_missing_file():
    with pytest.raises(FileNotFoundError):
        ConfigLoader.load("/nonexistent/config.yaml")


def test_file_must_be_a_mapping(config_file):
    with pytest.raises(ValueError, match="mapping"):
        ConfigLoader.load(config_file("- just\n- a list\n"))


def test_env_placeholders_are_substituted(config_file, monkeypatch):
    monkeypatch.setenv("PDB_HOST", "puppetdb.internal")
    path = config_file({"puppetdb_url": "http://${PDB_HOST}:8080"})

    config = ConfigLoader.load(path)

    assert config.puppetdb_url == "http://puppetdb.internal:8080"


def test_environment_only(monkeypatch):
    monkeypatch.setenv("PUPPETDB_URL", "http://puppetdb:8080")
    monkeypatch.setenv("REPORT_METRICS_CATEGORIES", "time")
    monkeypatch.setenv("PUPPETDB_SSL_SKIP_VERIFY", "true")
    monkeypatch.setenv("PUPPETDB_UNREPORTED_NODE", "30m")

    config = ConfigLoader.load()

    assert config.categories == frozenset({"time"})
    assert config.ssl_skip_verify is True
    assert config.unreported_node == timedelta(minutes=30)


def test_precedence_flag_over_env_over_file(config_file, monkeypatch):
    path = config_file({
        "puppetdb_url": "http://from-file:8080",
        "metric_path": "/file-metrics",
        "listen_address": "127.0.0.1:9000",
    })
    monkeypatch.setenv("PUPPETDB_URL", "http://from-env:8080")
    monkeypatch.setenv("PUPPETDB_METRIC_PATH", "/env-metrics")

    config = ConfigLoader.load(path, {"puppetdb_url": "http://from-flag:8080", "metric_path": None})

    assert config.puppetdb_url == "http://from-flag:8080"
    assert config.metric_path == "/env-metrics"
    assert config.listen_address == "127.0.0.1:9000"


def test_invalid_values_raise_validation_error(monkeypatch):
    monkeypatch.setenv("PUPPETDB_URL", "http://puppetdb:8080")

    with pytest.raises(ValidationError):
        ConfigLoader.load(overrides={"unreported_node": "soon"})


def test_settings_from_env_skips_unset(monkeypatch):
    monkeypatch.setenv("PUPPETDB_URL", "http://puppetdb:8080")
    monkeypatch.setenv("PUPPETDB_CA_FILE", "")

    assert Settings.from_env() == {"puppetdb_url": "http://puppetdb:8080"}
