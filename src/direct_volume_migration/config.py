"""Application settings."""

from enum import StrEnum

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


class RepositoryBackend(StrEnum):
    """Available persistence adapters for migration tasks."""

    IN_MEMORY = "in_memory"
    POSTGRES = "postgres"


class TransferBackendKind(StrEnum):
    """Available transfer backend adapters."""

    NOOP = "noop"
    HTTP = "http"


class Settings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    app_name: str = "Direct Volume Migration Controller"
    api_prefix: str = ""
    controller_id: str = "dvm-controller-local"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    repository_backend: RepositoryBackend = RepositoryBackend.IN_MEMORY
    postgres_dsn: str | None = None
    postgres_pool_min_size: int = 1
    postgres_pool_max_size: int = 10
    reconcile_workers: int = 4
    fast_requeue_seconds: float = 0.1
    advance_requeue_seconds: float = 0.1
    poll_requeue_seconds: float = 3.0
    error_backoff_base_seconds: float = 0.5
    error_backoff_max_seconds: float = 300.0
    resync_on_startup: bool = True
    cluster_config_namespace: str = "openshift-migration"
    cluster_config_name: str = "migration-cluster-config"
    endpoint_type_config_key: str = "RSYNC_ENDPOINT_TYPE"
    analytics_plan_label: str = "migplan"
    tracing_enabled: bool = False
    tracing_service_name: str = "DirectVolumeMigration"
    tracing_console_export: bool = False
    transfer_backend: TransferBackendKind = TransferBackendKind.NOOP
    transfer_agent_endpoint: str | None = None
    transfer_agent_timeout_seconds: float = 10.0

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        """Accept log levels in any case."""

        if not isinstance(value, str):
            return value
        return value.strip().upper()

    @model_validator(mode="after")
    def validate_settings(self) -> "Settings":
        """Ensure backend-specific and scheduling settings are valid."""

        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                "DVM_LOG_LEVEL must be one of " + ", ".join(sorted(_LOG_LEVELS)) + "."
            )
        if self.repository_backend == RepositoryBackend.POSTGRES and not self.postgres_dsn:
            raise ValueError("DVM_POSTGRES_DSN is required when DVM_REPOSITORY_BACKEND=postgres.")
        if self.postgres_pool_min_size < 1:
            raise ValueError("DVM_POSTGRES_POOL_MIN_SIZE must be >= 1.")
        if self.postgres_pool_max_size < self.postgres_pool_min_size:
            raise ValueError("DVM_POSTGRES_POOL_MAX_SIZE must be >= DVM_POSTGRES_POOL_MIN_SIZE.")
        if self.transfer_backend == TransferBackendKind.HTTP and not self.transfer_agent_endpoint:
            raise ValueError(
                "DVM_TRANSFER_AGENT_ENDPOINT is required when DVM_TRANSFER_BACKEND=http."
            )
        if self.transfer_agent_timeout_seconds <= 0:
            raise ValueError("DVM_TRANSFER_AGENT_TIMEOUT_SECONDS must be > 0.")
        if self.reconcile_workers < 1:
            raise ValueError("DVM_RECONCILE_WORKERS must be >= 1.")
        if self.fast_requeue_seconds <= 0:
            raise ValueError("DVM_FAST_REQUEUE_SECONDS must be > 0.")
        if self.advance_requeue_seconds <= 0:
            raise ValueError("DVM_ADVANCE_REQUEUE_SECONDS must be > 0.")
        if self.poll_requeue_seconds <= 0:
            raise ValueError("DVM_POLL_REQUEUE_SECONDS must be > 0.")
        if self.error_backoff_base_seconds <= 0:
            raise ValueError("DVM_ERROR_BACKOFF_BASE_SECONDS must be > 0.")
        if self.error_backoff_max_seconds < self.error_backoff_base_seconds:
            raise ValueError(
                "DVM_ERROR_BACKOFF_MAX_SECONDS must be >= DVM_ERROR_BACKOFF_BASE_SECONDS."
            )
        return self

    model_config = SettingsConfigDict(env_prefix="DVM_", extra="ignore")


__all__ = ["RepositoryBackend", "Settings", "TransferBackendKind"]
