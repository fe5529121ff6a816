import argparse
import logging
import sys
from typing import Iterable, List, Optional

from storage_audit.core.azure_client import StorageClientFactory, get_credential
from storage_audit.core.config import LOG_LEVELS, settings, validate_settings
from storage_audit.core.exceptions import StorageAuditError
from storage_audit.models.storage import AccountReport
from storage_audit.services.report_service import format_account_report
from storage_audit.services.storage_service import StorageService
from storage_audit.services.subscription_service import (
    IndexSelector, InteractiveSelector, MatchSelector, select_subscription
)

logger = logging.getLogger(__name__)


def configure_logging(level: str):
    """Log to stderr so the report on stdout stays clean"""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr
    )
    # The SDK logs every HTTP request at INFO
    logging.getLogger("azure").setLevel(logging.WARNING)


def parse_accounts(value: str) -> List[str]:
    accounts = [account.strip() for account in value.split(",") if account.strip()]
    if not accounts:
        raise argparse.ArgumentTypeError("expected a comma-separated list of storage account names")
    return accounts


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not a number")
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storage-audit",
        description="Report blob storage usage per container and per storage account"
    )
    parser.add_argument("-accounts", "--accounts", required=True, type=parse_accounts,
                        help="Comma-separated list of storage account names")
    subscription = parser.add_mutually_exclusive_group()
    subscription.add_argument("--subscription",
                              help="Subscription id, display name or 1-based list index; skips the prompt")
    subscription.add_argument("--no-subscription", action="store_true",
                              help="Do not list or select a subscription")
    parser.add_argument("--max-concurrency", type=positive_int, default=None,
                        help=f"Containers sized at once per account (default {settings.MAX_CONCURRENCY})")
    parser.add_argument("--timeout", type=positive_float, default=None,
                        help="Seconds allowed per account before in-flight containers are cancelled")
    parser.add_argument("--show-failures", action="store_true", default=settings.SHOW_FAILED_CONTAINERS,
                        help="Print a line for every container or account that could not be sized")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, type=str.upper, choices=LOG_LEVELS,
                        help=f"Logging level (default {settings.LOG_LEVEL})")
    return parser


def choose_selector(args):
    if args.no_subscription:
        return None
    if args.subscription:
        if args.subscription.strip().isdigit():
            return IndexSelector(int(args.subscription))
        return MatchSelector(args.subscription)
    if settings.AZURE_SUBSCRIPTION_ID:
        return MatchSelector(settings.AZURE_SUBSCRIPTION_ID)
    return InteractiveSelector()


def run(accounts: Iterable[str], storage_service: StorageService, output=None,
        show_failures: bool = False) -> List[AccountReport]:
    """Process accounts one at a time, writing each section as it finishes"""
    output = output or sys.stdout
    reports = []
    for account in accounts:
        report = storage_service.process_account(account)
        for line in format_account_report(report, show_failures=show_failures):
            print(line, file=output)
        print(file=output)
        output.flush()
        reports.append(report)
    return reports


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        validate_settings()
        configure_logging(args.log_level)
        logger.info(f"Auditing {len(args.accounts)} storage accounts")
        credential = get_credential()

        selector = choose_selector(args)
        if selector is not None:
            subscription = select_subscription(credential, selector)
            print(f"Using subscription: {subscription.subscription_id}\n")

        storage_service = StorageService(
            StorageClientFactory(credential),
            max_concurrency=args.max_concurrency,
            account_timeout=args.timeout
        )
        run(args.accounts, storage_service, show_failures=args.show_failures)
    except StorageAuditError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        return 130

    return 0


if __name__ == "__main__":
    sys.exit(main())
