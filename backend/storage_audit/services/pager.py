"""Forward-only paging over Azure SDK listings.

``PageLister`` wraps an ``ItemPaged`` listing (containers of an account or
blobs of a container) and hands it out one page at a time. Each page is a
single round trip to the storage service. Errors are not retried: the first
failing page ends the listing.
"""
import logging
import threading
from typing import Any, Callable, Iterator, List, Optional

from azure.core.exceptions import AzureError
from pydantic import BaseModel

from storage_audit.core.exceptions import ListingCancelled, ListingError, ListingExhaustedError

logger = logging.getLogger(__name__)


class Page(BaseModel):
    items: List[Any] = []
    continuation_token: Optional[str] = None


class PageLister:
    """Fetches pages from ``paged_factory()`` until the backend reports no more.

    ``paged_factory`` is called once, on the first fetch, and must return an
    object with a ``by_page()`` method (an Azure ``ItemPaged``). When a
    ``cancel_event`` is given it is checked before every fetch.
    """

    def __init__(self, paged_factory: Callable[[], Any], scope: str = "",
                 cancel_event: Optional[threading.Event] = None):
        self.scope = scope
        self._paged_factory = paged_factory
        self._cancel_event = cancel_event
        self._pages = None
        self._has_more = True
        self.pages_fetched = 0

    @property
    def has_more(self) -> bool:
        return self._has_more

    def next_page(self) -> Page:
        if not self._has_more:
            raise ListingExhaustedError(f"No more pages for {self.scope}")

        if self._cancel_event is not None and self._cancel_event.is_set():
            self._has_more = False
            raise ListingCancelled(f"Listing cancelled for {self.scope}", scope=self.scope)

        try:
            if self._pages is None:
                self._pages = self._paged_factory().by_page()
            items = list(next(self._pages))
        except StopIteration:
            # The service had nothing left to report
            self._has_more = False
            return Page()
        except AzureError as e:
            self._has_more = False
            raise ListingError(f"Failed to list {self.scope}: {e}", scope=self.scope) from e

        token = self._pages.continuation_token
        self._has_more = bool(token)
        self.pages_fetched += 1
        logger.debug(f"Fetched page {self.pages_fetched} of {self.scope} ({len(items)} items)")
        return Page(items=items, continuation_token=token)

    def __iter__(self) -> Iterator[Page]:
        while self.has_more:
            yield self.next_page()


def container_lister(blob_service, scope: str = "", cancel_event: Optional[threading.Event] = None,
                     results_per_page: Optional[int] = None) -> PageLister:
    """Pages of containers in a storage account"""
    kwargs = {}
    if results_per_page:
        kwargs["results_per_page"] = results_per_page
    return PageLister(lambda: blob_service.list_containers(**kwargs), scope=scope, cancel_event=cancel_event)


def blob_lister(blob_service, container_name: str, scope: str = "",
                cancel_event: Optional[threading.Event] = None,
                results_per_page: Optional[int] = None) -> PageLister:
    """Pages of blob metadata in one container (flat listing)"""
    kwargs = {}
    if results_per_page:
        kwargs["results_per_page"] = results_per_page

    def factory():
        container_client = blob_service.get_container_client(container_name)
        return container_client.list_blobs(**kwargs)

    return PageLister(factory, scope=scope or container_name, cancel_event=cancel_event)
