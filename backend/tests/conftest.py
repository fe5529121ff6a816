"""
Pytest fixtures for testing.

Provides in-memory stand-ins for the Azure SDK listing objects so that the
pager, the size calculator and the account aggregator can run without a
storage account.
"""

import threading
import time
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from azure.core.exceptions import HttpResponseError

from storage_audit.core.exceptions import AccountClientError

GIB = 1024 ** 3


class FakePageIterator:
    """Mimics the iterator returned by ItemPaged.by_page()"""

    def __init__(self, pages, fail_at=None, error=None, on_fetch=None):
        self._pages = pages
        self._index = 0
        self._fail_at = fail_at
        self._error = error or HttpResponseError(message="Server failed to authenticate the request")
        self._on_fetch = on_fetch
        self.continuation_token = None
        self.fetches = 0

    def __iter__(self):
        return self

    def __next__(self):
        if self._index >= len(self._pages):
            raise StopIteration
        self.fetches += 1
        if self._on_fetch:
            self._on_fetch()
        if self._fail_at is not None and self._index == self._fail_at:
            raise self._error
        page = self._pages[self._index]
        self._index += 1
        self.continuation_token = f"marker-{self._index}" if self._index < len(self._pages) else None
        return iter(page)


class FakePaged:
    """Mimics azure.core.paging.ItemPaged"""

    def __init__(self, pages, fail_at=None, error=None, on_fetch=None):
        self.pages = pages
        self.fail_at = fail_at
        self.error = error
        self.on_fetch = on_fetch
        self.page_iterators = []

    def by_page(self, continuation_token=None):
        page_iterator = FakePageIterator(self.pages, self.fail_at, self.error, self.on_fetch)
        self.page_iterators.append(page_iterator)
        return page_iterator


def blob_pages(*pages):
    """Blob listing pages from lists of sizes"""
    return [[SimpleNamespace(name=f"blob-{i}-{j}", size=size) for j, size in enumerate(page)]
            for i, page in enumerate(pages)]


class FakeContainerClient:

    def __init__(self, service, name):
        self.service = service
        self.name = name

    def list_blobs(self, **kwargs):
        self.service.list_blobs_calls.append((self.name, kwargs))
        container = self.service.containers[self.name]
        return FakePaged(
            container.get("pages", [[]]),
            fail_at=container.get("fail_at"),
            on_fetch=self.service.make_fetch_hook(self.name)
        )


class FakeBlobService:
    """Mimics BlobServiceClient for one storage account.

    ``containers`` maps a container name to ``{"pages": [...], "fail_at": n}``
    where pages come from ``blob_pages``.
    """

    def __init__(self, containers=None, containers_per_page=2, list_fail_at=None, fetch_delay=0.0,
                 list_delay=0.0):
        self.containers = containers or {}
        self.list_delay = list_delay
        self.containers_per_page = containers_per_page
        self.list_fail_at = list_fail_at
        self.fetch_delay = fetch_delay
        self.list_blobs_calls = []
        self.container_clients = []
        self._lock = threading.Lock()
        self.active_fetches = 0
        self.max_active_fetches = 0

    def make_fetch_hook(self, container_name):
        def hook():
            with self._lock:
                self.active_fetches += 1
                self.max_active_fetches = max(self.max_active_fetches, self.active_fetches)
            if self.fetch_delay:
                time.sleep(self.containers[container_name].get("delay", self.fetch_delay))
            with self._lock:
                self.active_fetches -= 1
        return hook

    def list_containers(self, **kwargs):
        names = list(self.containers)
        pages = [[SimpleNamespace(name=name) for name in names[i:i + self.containers_per_page]]
                 for i in range(0, len(names), self.containers_per_page)] or [[]]
        on_fetch = (lambda: time.sleep(self.list_delay)) if self.list_delay else None
        return FakePaged(pages, fail_at=self.list_fail_at, on_fetch=on_fetch)

    def get_container_client(self, name):
        client = FakeContainerClient(self, name)
        self.container_clients.append(client)
        return client


@pytest.fixture
def make_factory():
    """Build a client factory serving FakeBlobService objects by account name"""
    def _make(services):
        factory = Mock()

        def get_blob_service_client(account_name):
            service = services[account_name]
            if isinstance(service, Exception):
                raise service
            return service

        factory.get_blob_service_client.side_effect = get_blob_service_client
        return factory
    return _make


@pytest.fixture
def bad_account_error():
    return AccountClientError("Invalid storage account name: 'Bad_Name'")
