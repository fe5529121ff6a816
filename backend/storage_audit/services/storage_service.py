import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed, wait
from typing import Dict, List, Optional

from storage_audit.core.azure_client import StorageClientFactory
from storage_audit.core.config import settings
from storage_audit.core.exceptions import AccountClientError, ListingCancelled, ListingError
from storage_audit.models.storage import AccountReport, ContainerResult
from storage_audit.services.pager import blob_lister, container_lister

logger = logging.getLogger(__name__)


def get_container_size(blob_service, container_name: str,
                       cancel_event: Optional[threading.Event] = None,
                       results_per_page: Optional[int] = None) -> int:
    """Sum the size of every blob in a container.

    Pages are consumed in arrival order. A failing page raises ListingError
    and the running total is discarded with it.
    """
    total_size = 0
    lister = blob_lister(blob_service, container_name, cancel_event=cancel_event,
                         results_per_page=results_per_page)
    for page in lister:
        for blob in page.items:
            total_size += blob.size or 0
    return total_size


def list_container_names(blob_service, account_name: str = "",
                         cancel_event: Optional[threading.Event] = None,
                         results_per_page: Optional[int] = None) -> List[str]:
    """List every container in the account, or raise ListingError"""
    containers = []
    lister = container_lister(blob_service, scope=f"containers of {account_name}",
                              cancel_event=cancel_event, results_per_page=results_per_page)
    for page in lister:
        containers.extend(container.name for container in page.items)
    return containers


class StorageService:
    """Computes per-container and per-account blob usage.

    Containers of one account are sized concurrently on a bounded thread
    pool; accounts are expected to be processed one after another.
    """

    def __init__(self, client_factory: StorageClientFactory,
                 max_concurrency: Optional[int] = None,
                 account_timeout: Optional[float] = None,
                 page_size: Optional[int] = None):
        self.client_factory = client_factory
        self.max_concurrency = max_concurrency or settings.MAX_CONCURRENCY
        self.account_timeout = account_timeout if account_timeout is not None else settings.ACCOUNT_TIMEOUT_SECONDS
        self.page_size = page_size if page_size is not None else settings.PAGE_SIZE

    def process_account(self, account_name: str) -> AccountReport:
        """Size every container of one account and return the report"""
        try:
            blob_service = self.client_factory.get_blob_service_client(account_name)
        except AccountClientError as e:
            logger.error(f"Error creating service client for account {account_name}: {e}")
            return AccountReport(account=account_name, error=str(e))

        cancel_event = threading.Event()
        deadline = None
        timer = None
        if self.account_timeout:
            # The deadline covers container listing as well as sizing
            deadline = time.monotonic() + self.account_timeout
            timer = threading.Timer(self.account_timeout, cancel_event.set)
            timer.daemon = True
            timer.start()

        try:
            try:
                container_names = list_container_names(
                    blob_service, account_name,
                    cancel_event=cancel_event,
                    results_per_page=self.page_size
                )
            except ListingError as e:
                logger.error(f"Error listing containers for account {account_name}: {e}")
                return AccountReport(account=account_name, error=str(e))

            logger.info(f"Found {len(container_names)} containers in account {account_name}")

            if not container_names:
                return AccountReport(account=account_name)

            results = self._size_containers(blob_service, account_name, container_names, cancel_event, deadline)
        finally:
            if timer is not None:
                timer.cancel()

        # Keep the breakdown in listing order regardless of completion order
        report = AccountReport(
            account=account_name,
            results=[results[name] for name in container_names]
        )
        logger.info(
            f"Account {account_name}: {len(report.containers)} containers sized, "
            f"{len(report.failed)} failed, {report.total_size} bytes"
        )
        return report

    def _size_containers(self, blob_service, account_name: str, container_names: List[str],
                         cancel_event: threading.Event,
                         deadline: Optional[float] = None) -> Dict[str, ContainerResult]:
        results = {}

        def process_container(container_name):
            return get_container_size(
                blob_service, container_name,
                cancel_event=cancel_event,
                results_per_page=self.page_size
            )

        max_workers = min(self.max_concurrency, len(container_names))
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"size-{account_name}") as executor:
            futures = {executor.submit(process_container, name): name for name in container_names}
            try:
                if deadline is not None:
                    _, pending = wait(futures, timeout=max(0.0, deadline - time.monotonic()))
                    if pending:
                        logger.warning(
                            f"Account {account_name} exceeded {self.account_timeout}s, "
                            f"cancelling {len(pending)} containers"
                        )
                        cancel_event.set()
                        for future in pending:
                            future.cancel()

                for future in as_completed(futures):
                    container_name = futures[future]
                    results[container_name] = self._collect(future, container_name, account_name)
            except BaseException:
                # Stop in-flight workers at their next page before the pool joins them
                cancel_event.set()
                raise

        return results

    def _collect(self, future, container_name: str, account_name: str) -> ContainerResult:
        if future.cancelled():
            logger.error(f"Container {container_name} in account {account_name} was cancelled before it started")
            return ContainerResult(name=container_name, error="cancelled")

        try:
            size = future.result()
        except ListingCancelled as e:
            logger.error(f"Container {container_name} in account {account_name} was cancelled: {e}")
            return ContainerResult(name=container_name, error="cancelled")
        except ListingError as e:
            logger.error(f"Error processing container {container_name} in account {account_name}: {e}")
            return ContainerResult(name=container_name, error=str(e))
        except Exception as e:
            logger.exception(f"Unexpected error processing container {container_name} in account {account_name}: {e}")
            return ContainerResult(name=container_name, error=str(e))

        logger.debug(f"Container {container_name} in account {account_name}: {size} bytes")
        return ContainerResult(name=container_name, size=size)
