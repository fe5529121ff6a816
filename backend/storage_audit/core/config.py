from pydantic_settings import BaseSettings
from typing import Optional

from storage_audit.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    model_config = {"extra": "allow", "env_file": ".env", "case_sensitive": True}

    # Application
    APP_NAME: str = "storage-audit"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Azure Authentication
    # Service principal is used only when all three are set
    AZURE_TENANT_ID: Optional[str] = None
    AZURE_CLIENT_ID: Optional[str] = None
    AZURE_CLIENT_SECRET: Optional[str] = None

    # Subscription to report under; the operator is prompted when unset
    AZURE_SUBSCRIPTION_ID: Optional[str] = None

    # Azure Storage
    STORAGE_ENDPOINT_SUFFIX: str = "blob.core.windows.net"

    # Aggregation
    MAX_CONCURRENCY: int = 10
    PAGE_SIZE: Optional[int] = None
    ACCOUNT_TIMEOUT_SECONDS: Optional[float] = None

    # Report
    SHOW_FAILED_CONTAINERS: bool = False

    @property
    def use_service_principal(self) -> bool:
        """True when every service principal field is present"""
        return all([self.AZURE_TENANT_ID, self.AZURE_CLIENT_ID, self.AZURE_CLIENT_SECRET])


LOG_LEVELS = ["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


# Create settings instance
settings = Settings()


def validate_settings():
    """Validate numeric limits before a run starts"""
    problems = []

    if settings.MAX_CONCURRENCY < 1:
        problems.append("MAX_CONCURRENCY must be at least 1")

    if settings.PAGE_SIZE is not None and settings.PAGE_SIZE < 1:
        problems.append("PAGE_SIZE must be at least 1")

    if settings.ACCOUNT_TIMEOUT_SECONDS is not None and settings.ACCOUNT_TIMEOUT_SECONDS <= 0:
        problems.append("ACCOUNT_TIMEOUT_SECONDS must be greater than 0")

    if str(settings.LOG_LEVEL).upper() not in LOG_LEVELS:
        problems.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    if not settings.STORAGE_ENDPOINT_SUFFIX.strip():
        problems.append("STORAGE_ENDPOINT_SUFFIX must not be empty")

    if problems:
        raise ConfigurationError(f"Invalid settings: {'; '.join(problems)}")
