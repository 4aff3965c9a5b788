"""Pydantic models for PuppetDB query API records."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Node(BaseModel):
    """A node as returned by the ``/pdb/query/v4/nodes`` endpoint."""

    model_config = ConfigDict(extra="ignore")

    certname: str
    deactivated: str = ""
    report_environment: str = ""
    report_timestamp: str = ""
    latest_report_status: str = ""
    latest_report_hash: str = ""

    @field_validator(
        'deactivated', 'report_environment', 'report_timestamp',
        'latest_report_status', 'latest_report_hash',
        mode='before'
    )
    @classmethod
    def null_as_empty(cls, v: Optional[str]) -> str:
        """PuppetDB sends null for fields that are not set."""
        return "" if v is None else v


class ReportMetric(BaseModel):
    """A single entry of ``/pdb/query/v4/reports/<hash>/metrics``."""

    model_config = ConfigDict(extra="ignore")

    category: str
    name: str
    value: float
