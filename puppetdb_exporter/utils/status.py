"""Report status helpers."""

# Synthetic status for nodes without a usable report
UNREPORTED = "unreported"


def resolve_status(latest_report_status: str) -> str:
    """
    Status label for a node's latest report.

    PuppetDB statuses are passed through untouched so new values show up
    as new label values; a missing status maps to ``unreported``.

    Args:
        latest_report_status: Raw ``latest_report_status`` of a node

    Returns:
        str: Status label value
    """
    return latest_report_status or UNREPORTED


def deactivated_label(deactivated: str) -> str:
    """Render the presence of a deactivation timestamp as a label value."""
    return "true" if deactivated else "false"
