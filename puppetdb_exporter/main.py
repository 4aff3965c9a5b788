"""Main application entry point for the Prometheus PuppetDB exporter."""

import argparse
import logging
import os
import platform
import signal
import sys
from typing import Optional

from prometheus_client import CollectorRegistry, Gauge

from .collectors.prometheus_bridge import PrometheusBridge
from .collectors.puppetdb_collector import PuppetDBCollector
from .collectors.schema import build_schema
from .config.loader import ConfigLoader
from .config.models import DEFAULT_CATEGORIES, ExporterConfig
from .services.puppetdb_client import PuppetDBClient
from .utils.logger import setup_logger
from .web import create_app, serve

__version__ = "1.1.0"

# Filled in by the build
COMMIT_SHA = os.getenv("PUPPETDB_EXPORTER_COMMIT_SHA", "unknown")
BUILD_DATE = os.getenv("PUPPETDB_EXPORTER_BUILD_DATE", "unknown")


class ExporterApp:
    """
    PuppetDB exporter application.

    Wires the PuppetDB client, metric schema and collector into a
    prometheus_client registry and serves it over HTTP.
    """

    def __init__(self, config: ExporterConfig, logger: Optional[logging.Logger] = None):
        """
        Initialize exporter application.

        Args:
            config: Validated exporter configuration
            logger: Logger instance, configured from ``config`` when omitted

        Raises:
            PuppetDBError: If the PuppetDB client cannot be created
        """
        self.config = config
        self.logger = logger or setup_logger("puppetdb_exporter", config.effective_log_level)
        self.server = None

        self.logger.info(
            f"PuppetDB Metrics Exporter {__version__}    build date: {BUILD_DATE}    "
            f"sha1: {COMMIT_SHA}    Python: {platform.python_version()}"
        )
        self.logger.debug("Enabling debug output")

        self.client = PuppetDBClient.from_config(config, self.logger)
        self.schema = build_schema(config.categories)
        self.collector = PuppetDBCollector(
            client=self.client,
            schema=self.schema,
            categories=config.categories,
            unreported_duration=config.unreported_node,
            logger=self.logger
        )

        self.registry = CollectorRegistry(auto_describe=False)
        self.registry.register(PrometheusBridge(self.collector, self.logger))
        self._register_build_info()

        self.app = create_app(self.registry, config.metric_path, __version__, self.logger)

    def _register_build_info(self):
        build_info = Gauge(
            "puppetdb_exporter_build_info",
            "puppetdb exporter build informations",
            ["version", "commit_sha", "build_date", "python_version"],
            registry=self.registry
        )
        build_info.labels(__version__, COMMIT_SHA, BUILD_DATE, platform.python_version()).set(1)

    def _signal_handler(self, signum, frame):
        """
        Handle shutdown signals.

        Args:
            signum: Signal number
            frame: Current stack frame
        """
        signal_name = signal.Signals(signum).name
        self.logger.info(f"Received {signal_name}, shutting down...")
        sys.exit(0)

    def run(self):
        """
        Serve metrics until interrupted (SIGTERM/SIGINT).
        """
        signal.signal(signal.SIGTERM, self._signal_handler)
        signal.signal(signal.SIGINT, self._signal_handler)

        self.server = serve(
            self.app,
            self.config.listen_host,
            self.config.listen_port,
            self.logger
        )
        self.logger.info(
            f"Providing metrics at {self.config.listen_address}{self.config.metric_path}"
        )

        try:
            self.server.serve_forever()
        finally:
            self.server.server_close()
            self.client.close()
            self.logger.info("Exporter stopped")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Prometheus exporter for PuppetDB node and report metrics',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Every option can also be set through its environment variable or a YAML
config file; flags win over the environment, which wins over the file.

Examples:
  # Plain HTTP PuppetDB
  puppetdb-exporter --puppetdb-url http://puppetdb:8080

  # PuppetDB with client certificates
  puppetdb-exporter -u https://puppetdb:8081 \\
      --cert-file cert.pem --key-file key.pem --ca-file ca.pem
        """
    )

    parser.add_argument('--version', action='store_true', help='Show version.')
    parser.add_argument('--config', help='Path to YAML configuration file')
    parser.add_argument(
        '-u', '--puppetdb-url', dest='puppetdb_url',
        help='PuppetDB base URL. [$PUPPETDB_URL]'
    )
    parser.add_argument(
        '--cert-file', dest='cert_file',
        help='A PEM encoded certificate file. [$PUPPETDB_CERT_FILE]'
    )
    parser.add_argument(
        '--key-file', dest='key_file',
        help='A PEM encoded private key file. [$PUPPETDB_KEY_FILE]'
    )
    parser.add_argument(
        '--ca-file', dest='ca_file',
        help="A PEM encoded CA's certificate. [$PUPPETDB_CA_FILE]"
    )
    parser.add_argument(
        '--ssl-skip-verify', dest='ssl_skip_verify', action='store_true', default=None,
        help='Skip SSL verification. [$PUPPETDB_SSL_SKIP_VERIFY]'
    )
    parser.add_argument(
        '--timeout', type=float,
        help='PuppetDB request timeout in seconds (default: 30). [$PUPPETDB_TIMEOUT]'
    )
    parser.add_argument(
        '--listen-address', dest='listen_address',
        help='Address to listen on for web interface and telemetry '
             '(default: 0.0.0.0:9121). [$PUPPETDB_LISTEN_ADDRESS]'
    )
    parser.add_argument(
        '--metric-path', dest='metric_path',
        help='Path under which to expose metrics (default: /metrics). [$PUPPETDB_METRIC_PATH]'
    )
    parser.add_argument(
        '--verbose', action='store_true', default=None,
        help='Enable debug mode. [$PUPPETDB_VERBOSE]'
    )
    parser.add_argument(
        '--log-level', dest='log_level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: INFO). [$LOG_LEVEL]'
    )
    parser.add_argument(
        '--unreported-node', dest='unreported_node',
        help='Tag nodes as unreported if the latest report is older than the '
             'defined duration (default: 2h). [$PUPPETDB_UNREPORTED_NODE]'
    )
    parser.add_argument(
        '--categories',
        help=f'Report metrics categories to scrape (default: {DEFAULT_CATEGORIES}). '
             '[$REPORT_METRICS_CATEGORIES]'
    )
    return parser


def main(argv=None):
    """
    CLI entry point.

    Parses command-line arguments and starts the exporter.
    """
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"puppetdb-exporter {__version__}")
        return

    overrides = {k: v for k, v in vars(args).items() if k not in ('version', 'config')}

    try:
        config = ConfigLoader.load(args.config, overrides)
    except Exception as e:
        logging.error(f"Failed to load configuration: {e}")
        sys.exit(1)

    try:
        app = ExporterApp(config)
    except Exception as e:
        logging.error(f"Failed to initialize exporter: {e}", exc_info=True)
        sys.exit(1)

    app.run()


if __name__ == '__main__':
    main()
