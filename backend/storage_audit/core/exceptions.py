"""Error types raised while auditing storage accounts.

Configuration, credential and subscription errors stop the whole run.
Account errors stop one account. Listing errors raised inside a container
worker only drop that container. Account and listing errors are recorded on
the report and never reach the entry point.
"""


class StorageAuditError(Exception):
    """Base class for every error raised by storage-audit"""


class ConfigurationError(StorageAuditError):
    pass


class CredentialError(StorageAuditError):
    pass


class SubscriptionSelectionError(StorageAuditError):
    pass


class AccountClientError(StorageAuditError):
    """The account name could not be turned into a usable blob client"""


class ListingError(StorageAuditError):
    """A page fetch failed; the rest of the listing is abandoned"""

    def __init__(self, message: str, scope: str = ""):
        super().__init__(message)
        self.scope = scope


class ListingCancelled(ListingError):
    """The listing was stopped at a page boundary by its cancellation event"""


class ListingExhaustedError(RuntimeError):
    """next_page() was called after the backend reported the last page"""
