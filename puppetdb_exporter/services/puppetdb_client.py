"""PuppetDB query API client."""

import logging
import ssl
from typing import Any, List, Optional
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError

from ..config.models import ExporterConfig
from .models import Node, ReportMetric


class PuppetDBError(Exception):
    """Raised when PuppetDB cannot be reached or returns unusable data."""


_NODES = TypeAdapter(List[Node])
_REPORT_METRICS = TypeAdapter(List[ReportMetric])


class PuppetDBClient:
    """
    Synchronous client for the PuppetDB v4 query API.

    Safe to share between threads; each call is a single blocking request.
    """

    NODES_ENDPOINT = "/pdb/query/v4/nodes"
    REPORT_METRICS_ENDPOINT = "/pdb/query/v4/reports/{report_hash}/metrics"

    def __init__(
        self,
        url: str,
        cert_path: Optional[str] = None,
        key_path: Optional[str] = None,
        ca_cert_path: Optional[str] = None,
        ssl_verify: bool = True,
        timeout: float = 30.0,
        logger: Optional[logging.Logger] = None,
        transport: Optional[httpx.BaseTransport] = None
    ):
        """
        Initialize PuppetDB client.

        Args:
            url: PuppetDB base URL (e.g., https://puppetdb:8081)
            cert_path: PEM encoded client certificate
            key_path: PEM encoded client private key
            ca_cert_path: PEM encoded CA certificate used to verify PuppetDB
            ssl_verify: Verify the server certificate
            timeout: Request timeout in seconds
            logger: Logger instance
            transport: Optional httpx transport, replaces the network layer

        Raises:
            PuppetDBError: If the TLS material cannot be loaded
        """
        self.url = url.rstrip("/")
        self.logger = (logger or logging.getLogger(__name__)).getChild(self.__class__.__name__)
        self._client = httpx.Client(
            base_url=self.url,
            verify=self._create_ssl_context(cert_path, key_path, ca_cert_path, ssl_verify),
            timeout=timeout,
            headers={"Accept": "application/json"},
            transport=transport
        )

    @classmethod
    def from_config(cls, config: ExporterConfig, logger: logging.Logger) -> "PuppetDBClient":
        """Build a client from the exporter configuration."""
        return cls(
            url=config.puppetdb_url,
            cert_path=config.cert_file,
            key_path=config.key_file,
            ca_cert_path=config.ca_file,
            ssl_verify=not config.ssl_skip_verify,
            timeout=config.timeout,
            logger=logger
        )

    @staticmethod
    def _create_ssl_context(
        cert_path: Optional[str],
        key_path: Optional[str],
        ca_cert_path: Optional[str],
        ssl_verify: bool
    ) -> ssl.SSLContext:
        """Create SSL context carrying the CA and client certificate."""
        try:
            ssl_context = ssl.create_default_context(cafile=ca_cert_path or None)
            if cert_path:
                ssl_context.load_cert_chain(certfile=cert_path, keyfile=key_path or None)
        except (OSError, ssl.SSLError) as e:
            raise PuppetDBError(f"failed to load TLS configuration: {e}") from e

        if not ssl_verify:
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE
        return ssl_context

    def nodes(self) -> List[Node]:
        """
        List all nodes known to PuppetDB.

        Returns:
            List[Node]: Nodes in the order PuppetDB returned them

        Raises:
            PuppetDBError: On transport, HTTP or payload errors
        """
        return self._query(self.NODES_ENDPOINT, _NODES)

    def report_metrics(self, report_hash: str) -> List[ReportMetric]:
        """
        List the metrics of a single report.

        Args:
            report_hash: Hash of the report

        Returns:
            List[ReportMetric]: Metrics of the report, all categories

        Raises:
            PuppetDBError: On transport, HTTP or payload errors
        """
        path = self.REPORT_METRICS_ENDPOINT.format(report_hash=quote(report_hash, safe=""))
        return self._query(path, _REPORT_METRICS)

    def _query(self, path: str, adapter: TypeAdapter) -> Any:
        self.logger.debug(f"GET {self.url}{path}")

        try:
            response = self._client.get(path)
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            raise PuppetDBError(f"request to {path} timed out") from e
        except httpx.HTTPStatusError as e:
            raise PuppetDBError(
                f"{path} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise PuppetDBError(f"request to {path} failed: {e}") from e
        except ValueError as e:
            raise PuppetDBError(f"invalid JSON from {path}: {e}") from e

        try:
            return adapter.validate_python(payload)
        except ValidationError as e:
            raise PuppetDBError(f"unexpected payload from {path}: {e}") from e

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "PuppetDBClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
