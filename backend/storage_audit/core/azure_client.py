from azure.identity import ClientSecretCredential, DefaultAzureCredential
from azure.storage.blob import BlobServiceClient
import logging
import re
from typing import Optional

from storage_audit.core.config import settings
from storage_audit.core.exceptions import AccountClientError, CredentialError

logger = logging.getLogger(__name__)

# Storage account names: 3-24 characters, lowercase letters and digits only
ACCOUNT_NAME_PATTERN = re.compile(r"^[a-z0-9]{3,24}$")


def get_credential():
    """Get Azure credential based on environment"""
    try:
        if settings.use_service_principal:
            logger.info("Using Service Principal credentials")
            return ClientSecretCredential(
                tenant_id=settings.AZURE_TENANT_ID,
                client_id=settings.AZURE_CLIENT_ID,
                client_secret=settings.AZURE_CLIENT_SECRET
            )

        logger.info("Using DefaultAzureCredential")
        return DefaultAzureCredential()
    except Exception as e:
        logger.error(f"Failed to get Azure credential: {e}")
        raise CredentialError(f"Failed to get Azure credential: {e}") from e


class StorageClientFactory:
    """Builds one BlobServiceClient per storage account from a shared credential.

    The credential is only read, so a single factory can serve every account
    processed during a run.
    """

    def __init__(self, credential, endpoint_suffix: Optional[str] = None):
        self.credential = credential
        self.endpoint_suffix = (endpoint_suffix or settings.STORAGE_ENDPOINT_SUFFIX).strip(".")

    def account_url(self, account_name: str) -> str:
        return f"https://{account_name}.{self.endpoint_suffix}"

    def get_blob_service_client(self, account_name: str) -> BlobServiceClient:
        """Get blob service client for a specific storage account"""
        # Host names are case-insensitive; the service only knows the lowercase name
        normalized = (account_name or "").strip().lower()
        if not ACCOUNT_NAME_PATTERN.match(normalized):
            raise AccountClientError(f"Invalid storage account name: {account_name!r}")

        try:
            return BlobServiceClient(account_url=self.account_url(normalized), credential=self.credential)
        except Exception as e:
            raise AccountClientError(
                f"Failed to create blob service client for {account_name}: {e}"
            ) from e
