from typing import List

from storage_audit.models.storage import AccountReport

BYTES_PER_GB = 1024 ** 3


def bytes_to_gb(size: int) -> float:
    return size / BYTES_PER_GB


def format_gb(size: int) -> str:
    """Bytes as gigabytes with two decimals, e.g. 1610612736 -> '1.50'"""
    return f"{bytes_to_gb(size):.2f}"


def format_account_report(report: AccountReport, show_failures: bool = False) -> List[str]:
    """Lines for one account section, without the trailing blank line"""
    lines = [f"Processing account: {report.account}"]

    for container in report.containers:
        lines.append(f"Container: {container.name}, Size: {format_gb(container.size)} GB")

    if show_failures:
        if report.error:
            lines.append(f"Account error: {report.error}")
        for result in report.failed:
            lines.append(f"Container: {result.name}, FAILED: {result.error}")

    lines.append(f"Total size for account {report.account}: {format_gb(report.total_size)} GB")
    return lines
