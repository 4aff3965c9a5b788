"""Environment settings."""

import os
from typing import Dict, Optional


class Settings:
    """Exporter settings read from environment variables."""

    # Config field -> environment variable
    ENV_VARS = {
        "puppetdb_url": "PUPPETDB_URL",
        "cert_file": "PUPPETDB_CERT_FILE",
        "key_file": "PUPPETDB_KEY_FILE",
        "ca_file": "PUPPETDB_CA_FILE",
        "ssl_skip_verify": "PUPPETDB_SSL_SKIP_VERIFY",
        "timeout": "PUPPETDB_TIMEOUT",
        "listen_address": "PUPPETDB_LISTEN_ADDRESS",
        "metric_path": "PUPPETDB_METRIC_PATH",
        "verbose": "PUPPETDB_VERBOSE",
        "log_level": "LOG_LEVEL",
        "unreported_node": "PUPPETDB_UNREPORTED_NODE",
        "categories": "REPORT_METRICS_CATEGORIES",
    }

    @staticmethod
    def get(key: str, default: Optional[str] = None) -> str:
        """
        Get environment variable value.

        Args:
            key: Environment variable name
            default: Default value if not set

        Returns:
            str: Environment variable value
        """
        value = os.getenv(key, default)
        return value or ""

    @classmethod
    def from_env(cls) -> Dict[str, str]:
        """
        Collect configuration values set in the environment.

        Returns:
            Dict[str, str]: Config field name to raw value, unset variables omitted
        """
        values = {}
        for field_name, env_var in cls.ENV_VARS.items():
            value = cls.get(env_var)
            if value:
                values[field_name] = value
        return values
