from .pager import Page, PageLister, blob_lister, container_lister
from .storage_service import StorageService, get_container_size, list_container_names
from .subscription_service import (
    IndexSelector, InteractiveSelector, MatchSelector, list_subscriptions, select_subscription
)
from .report_service import bytes_to_gb, format_account_report, format_gb

__all__ = [
    "Page",
    "PageLister",
    "blob_lister",
    "container_lister",
    "StorageService",
    "get_container_size",
    "list_container_names",
    "IndexSelector",
    "InteractiveSelector",
    "MatchSelector",
    "list_subscriptions",
    "select_subscription",
    "bytes_to_gb",
    "format_account_report",
    "format_gb"
]
