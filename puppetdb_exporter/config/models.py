"""Pydantic configuration models for the exporter."""

from datetime import timedelta
from typing import FrozenSet, Optional
import re

from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.duration import parse_duration

DEFAULT_CATEGORIES = "resources,time,changes,events"

_CATEGORY_NAME = re.compile(r'^[a-zA-Z0-9_]+$')


class ExporterConfig(BaseModel):
    """Root configuration model for the PuppetDB exporter."""

    puppetdb_url: str
    cert_file: Optional[str] = None
    key_file: Optional[str] = None
    ca_file: Optional[str] = None
    ssl_skip_verify: bool = False
    timeout: float = Field(default=30.0, gt=0)

    listen_address: str = "0.0.0.0:9121"
    metric_path: str = "/metrics"

    verbose: bool = False
    log_level: str = "INFO"

    # Nodes whose latest report is older than this count as unreported
    unreported_node: timedelta = timedelta(hours=2)
    categories: FrozenSet[str] = Field(
        default_factory=lambda: frozenset(DEFAULT_CATEGORIES.split(","))
    )

    @field_validator('puppetdb_url')
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v.rstrip('/')

    @field_validator('listen_address')
    @classmethod
    def validate_listen_address(cls, v: str) -> str:
        """Require host:port with a numeric port."""
        _, sep, port = v.rpartition(':')
        if not sep or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError('listen address must be host:port')
        return v

    @field_validator('metric_path')
    @classmethod
    def validate_metric_path(cls, v: str) -> str:
        if not v.startswith('/') or v == '/':
            raise ValueError('metric path must start with / and not be the root path')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'unknown log level: {v}')
        return level

    @field_validator('unreported_node', mode='before')
    @classmethod
    def parse_unreported_node(cls, v):
        """Accept Go-style duration strings (``2h``, ``90m``)."""
        if isinstance(v, str):
            v = parse_duration(v)
        if isinstance(v, timedelta) and v < timedelta(0):
            raise ValueError('unreported node duration must not be negative')
        return v

    @field_validator('categories', mode='before')
    @classmethod
    def split_categories(cls, v):
        """Accept a comma-separated string of category names."""
        if isinstance(v, str):
            v = v.split(',')
        return frozenset(str(item).strip() for item in v if str(item).strip())

    @field_validator('categories')
    @classmethod
    def validate_categories(cls, v: FrozenSet[str]) -> FrozenSet[str]:
        invalid = sorted(c for c in v if not _CATEGORY_NAME.match(c))
        if invalid:
            raise ValueError(f'invalid category names: {", ".join(invalid)}')
        return v

    @model_validator(mode='after')
    def validate_client_certificate(self) -> 'ExporterConfig':
        """A client certificate is only usable together with its key."""
        if bool(self.cert_file) != bool(self.key_file):
            raise ValueError('cert_file and key_file must be set together')
        return self

    @property
    def effective_log_level(self) -> str:
        return 'DEBUG' if self.verbose else self.log_level

    @property
    def listen_host(self) -> str:
        return self.listen_address.rpartition(":")[0].strip("[]")

    @property
    def listen_port(self) -> int:
        return int(self.listen_address.rpartition(':')[2])
